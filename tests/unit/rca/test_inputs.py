"""
Tests for resolution inputs: lookups and addressable parameters.
"""

from rootcause.rca.inputs import Lookup, LookupStatus, ResolutionInputs, RootcauseParams, requires_refresh


class TestLookup:
    """Test the tagged lookup outcome"""

    def test_default_is_not_requested(self):
        lookup = Lookup()

        assert lookup.status == LookupStatus.NOT_REQUESTED
        assert not lookup.requested
        assert not lookup.is_found

    def test_found_carries_value(self):
        lookup = Lookup.found({"id": 1})

        assert lookup.requested
        assert lookup.is_found
        assert lookup.value == {"id": 1}

    def test_not_found_and_failed_are_requested_but_absent(self):
        for lookup in (Lookup.not_found(), Lookup.failed("boom")):
            assert lookup.requested
            assert not lookup.is_found
            assert lookup.value is None

        assert Lookup.failed("boom").error == "boom"

    def test_inputs_default_to_not_requested(self):
        inputs = ResolutionInputs()

        assert not inputs.metric.requested
        assert not inputs.anomaly.requested
        assert not inputs.session.requested
        assert not inputs.anomaly_sessions.requested


class TestRefreshPolicy:
    """Test which parameter changes trigger a fresh resolution"""

    def test_first_entry_refreshes(self):
        assert requires_refresh(None, RootcauseParams())

    def test_metric_change_refreshes(self):
        assert requires_refresh(RootcauseParams(metric_id="1"), RootcauseParams(metric_id="2"))

    def test_anomaly_change_refreshes(self):
        assert requires_refresh(RootcauseParams(anomaly_id="1"), RootcauseParams(anomaly_id=None))

    def test_session_change_alone_does_not_refresh(self):
        previous = RootcauseParams(metric_id="1", session_id="a")
        current = RootcauseParams(metric_id="1", session_id="b")

        assert not requires_refresh(previous, current)


class TestParamRewrites:
    """Test redirect and exit rewrites"""

    def test_redirected_swaps_anomaly_for_session(self):
        params = RootcauseParams(metric_id="1", anomaly_id="99", compare_mode="WoW")

        redirected = params.redirected("s1")

        assert redirected.session_id == "s1"
        assert redirected.anomaly_id is None
        assert redirected.metric_id == "1"
        assert redirected.compare_mode == "WoW"

    def test_reset_on_exit_clears_session(self):
        params = RootcauseParams(metric_id="1", session_id="s1")

        assert params.reset_on_exit() == RootcauseParams(metric_id="1")
