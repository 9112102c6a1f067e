"""Tests for deprecations.registry module."""

import threading
import warnings

import pytest

from deprecations.categories import DeprecationNotice, SuppressedDeprecationNotice
from deprecations.exceptions import ConfigurationError
from deprecations.frames import CallerFrame, StaticFrameProvider
from deprecations.modes import ReportingMode
from deprecations.registry import DeprecationRegistry, get_registry, reset_registry, set_registry
from deprecations.testing import RecordingSink


# ============================================
# Counting
# ============================================


class TestCounting:
    """Every trigger that reaches the counting step is counted."""

    def test_new_registry_is_empty_and_disabled(self):
        registry = DeprecationRegistry()
        assert registry.mode is ReportingMode.DISABLED
        assert registry.sink is None
        assert registry.deduplication is True
        assert registry.get_unique_triggered_deprecations_count() == 0
        assert dict(registry.get_triggered_deprecations()) == {}

    def test_counts_while_disabled(self, registry):
        for _ in range(3):
            registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 3

    @pytest.mark.parametrize(
        "enable",
        [
            lambda r, s: r.enable_with_warnings(),
            lambda r, s: r.enable_with_suppressed_warnings(),
            lambda r, s: r.enable_with_logger(s),
        ],
        ids=["warn_emit", "warn_suppressed", "structured_log"],
    )
    def test_counts_regardless_of_mode(self, registry, sink, enable):
        enable(registry, sink)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            for _ in range(5):
                registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 5

    def test_unique_count_sums_all_links(self, registry):
        registry.trigger("acme", "A", "old")
        registry.trigger("acme", "A", "old")
        registry.trigger("other", "B", "old")
        assert registry.get_unique_triggered_deprecations_count() == 3

    def test_snapshot_is_read_only_and_detached(self, registry):
        registry.trigger("acme", "L", "old")
        snapshot = registry.get_triggered_deprecations()

        with pytest.raises(TypeError):
            snapshot["L"] = 10  # type: ignore[index]

        registry.trigger("acme", "L", "old")
        assert snapshot["L"] == 1
        assert registry.get_triggered_deprecations()["L"] == 2


# ============================================
# Deduplication
# ============================================


class TestDeduplication:
    """Only the first occurrence of a link is reported by default."""

    def test_same_link_reported_once(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.trigger("acme", "L", "old")
        registry.trigger("acme", "L", "old")
        assert len(sink.records) == 1
        assert registry.get_triggered_deprecations()["L"] == 2

    def test_distinct_links_each_reported(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.trigger("acme", "A", "first")
        registry.trigger("acme", "B", "second")
        assert sink.messages == ["first", "second"]

    def test_without_deduplication_reports_every_call(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.without_deduplication()
        registry.trigger("acme", "L", "old")
        registry.trigger("acme", "L", "old")
        assert len(sink.records) == 2
        assert registry.deduplication is False

    def test_occurrences_before_enabling_count_towards_deduplication(self, registry, sink):
        registry.trigger("acme", "L", "old")
        registry.enable_with_logger(sink)
        registry.trigger("acme", "L", "old")
        assert sink.records == []


# ============================================
# Temporary suppression
# ============================================


class TestTemporarySuppression:
    """ignore_deprecation_temporarily() swallows the next N triggers."""

    def test_swallows_next_triggers_without_counting(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.ignore_deprecation_temporarily("L", 2)

        registry.trigger("acme", "L", "old")
        registry.trigger("acme", "L", "old")
        assert sink.records == []
        assert "L" not in registry.get_triggered_deprecations()

        registry.trigger("acme", "L", "old")
        assert len(sink.records) == 1
        assert registry.get_triggered_deprecations()["L"] == 1

    def test_default_allowance_is_one(self, registry):
        registry.ignore_deprecation_temporarily("L")
        registry.trigger("acme", "L", "old")
        registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1

    def test_replaces_existing_allowance(self, registry):
        registry.ignore_deprecation_temporarily("L", 5)
        registry.ignore_deprecation_temporarily("L", 1)
        registry.trigger("acme", "L", "old")
        registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1

    def test_only_affects_its_own_link(self, registry):
        registry.ignore_deprecation_temporarily("L", 3)
        registry.trigger("acme", "OTHER", "old")
        assert registry.get_triggered_deprecations()["OTHER"] == 1

    def test_zero_allowance_never_applies(self, registry):
        registry.ignore_deprecation_temporarily("L", 0)
        registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1

    def test_checked_before_package_ignore(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.ignore_package("acme")
        registry.ignore_deprecation_temporarily("L", 1)

        registry.trigger("acme", "L", "old")
        assert "L" not in registry.get_triggered_deprecations()

        # Allowance consumed: the next call is counted (and still not reported).
        registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1
        assert sink.records == []


# ============================================
# Package and link filters
# ============================================


class TestIgnorePackage:
    def test_ignored_package_is_counted_not_reported(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.ignore_package("pkg")
        registry.trigger("pkg", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1
        assert sink.records == []

    def test_other_packages_still_reported(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.ignore_package("pkg")
        registry.trigger("acme", "L", "old")
        assert len(sink.records) == 1

    def test_idempotent(self, registry):
        registry.ignore_package("pkg")
        registry.ignore_package("pkg")
        assert registry.ignored_packages == frozenset({"pkg"})


class TestIgnoreDeprecations:
    def test_seeds_links_with_zero(self, registry):
        registry.ignore_deprecations("A", "B")
        assert dict(registry.get_triggered_deprecations()) == {"A": 0, "B": 0}
        assert registry.get_unique_triggered_deprecations_count() == 0

    def test_resets_existing_count(self, registry):
        registry.trigger("acme", "A", "old")
        registry.trigger("acme", "A", "old")
        registry.ignore_deprecations("A")
        assert registry.get_triggered_deprecations()["A"] == 0

    def test_seeded_link_is_still_reported_once(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.ignore_deprecations("A")
        registry.trigger("acme", "A", "old")
        registry.trigger("acme", "A", "old")
        assert len(sink.records) == 1


# ============================================
# Mode selection and disable()
# ============================================


class TestModeSelection:
    def test_enable_methods_set_mode(self, registry, sink):
        registry.enable_with_warnings()
        assert registry.mode is ReportingMode.WARN_EMIT
        registry.enable_with_suppressed_warnings()
        assert registry.mode is ReportingMode.WARN_SUPPRESSED
        registry.enable_with_logger(sink)
        assert registry.mode is ReportingMode.STRUCTURED_LOG
        assert registry.sink is sink

    def test_switching_away_from_logger_clears_sink(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.enable_with_warnings()
        assert registry.sink is None

    def test_enable_by_alias(self, registry, sink):
        registry.enable("trigger")
        assert registry.mode is ReportingMode.WARN_EMIT
        registry.enable("log", sink)
        assert registry.mode is ReportingMode.STRUCTURED_LOG
        registry.enable("off")
        assert registry.mode is ReportingMode.DISABLED

    def test_enable_with_unusable_sink_raises(self, registry):
        with pytest.raises(ConfigurationError):
            registry.enable_with_logger(object())
        assert registry.mode is ReportingMode.DISABLED


class TestDisable:
    def test_zeroes_counts_but_keeps_links(self, registry):
        registry.trigger("acme", "A", "old")
        registry.trigger("acme", "B", "old")
        registry.disable()
        assert dict(registry.get_triggered_deprecations()) == {"A": 0, "B": 0}
        assert registry.get_unique_triggered_deprecations_count() == 0

    def test_resets_mode_sink_and_deduplication(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.without_deduplication()
        registry.disable()
        assert registry.mode is ReportingMode.DISABLED
        assert registry.sink is None
        assert registry.deduplication is True

    def test_clears_temporary_suppression(self, registry, sink):
        registry.ignore_deprecation_temporarily("L", 5)
        registry.disable()
        registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1

        registry.enable_with_logger(sink)
        registry.disable()
        registry.enable_with_logger(sink)
        registry.trigger("acme", "L", "old")
        assert len(sink.records) == 1

    def test_keeps_ignored_packages(self, registry, sink):
        registry.ignore_package("pkg")
        registry.disable()
        registry.enable_with_logger(sink)
        registry.trigger("pkg", "L", "old")
        assert sink.records == []
        assert registry.ignored_packages == frozenset({"pkg"})


# ============================================
# Emission
# ============================================


class TestStructuredLog:
    def test_scenario_first_call_reported_second_counted(self, registry, sink):
        registry.enable_with_logger(sink)

        registry.trigger("acme", "ACME-1", "Use %s instead", "newFn")
        assert sink.records == [
            (
                "Use newFn instead",
                {
                    "file": "/srv/acme/src/acme/api.py",
                    "line": 10,
                    "package": "acme",
                    "link": "ACME-1",
                },
            )
        ]
        assert registry.get_triggered_deprecations()["ACME-1"] == 1

        registry.trigger("acme", "ACME-1", "Use %s instead", "newFn")
        assert len(sink.records) == 1
        assert registry.get_triggered_deprecations()["ACME-1"] == 2

    def test_escaped_percent_without_args_is_unescaped(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.trigger("acme", "L", "100%% deprecated")
        assert sink.messages == ["100% deprecated"]

    def test_escaped_percent_in_warning(self, registry):
        registry.enable_with_warnings()
        with pytest.warns(DeprecationNotice) as record:
            registry.trigger("acme", "L", "100%% deprecated")
        assert str(record[0].message).startswith("100% deprecated (api.py:10 called by main.py:42")

    def test_bare_percent_without_args_raises(self, registry, sink):
        registry.enable_with_logger(sink)
        with pytest.raises(TypeError):
            registry.trigger("acme", "L", "100% deprecated")
        assert sink.records == []

    def test_malformed_template_raises_after_counting(self, registry, sink):
        registry.enable_with_logger(sink)
        with pytest.raises(TypeError):
            registry.trigger("acme", "L", "Use %s and %s", "one")
        assert registry.get_triggered_deprecations()["L"] == 1

    def test_sink_failure_propagates(self, registry):
        class BrokenSink:
            def notice(self, message, context):
                raise RuntimeError("sink down")

        registry.enable_with_logger(BrokenSink())
        with pytest.raises(RuntimeError, match="sink down"):
            registry.trigger("acme", "L", "old")
        assert registry.get_triggered_deprecations()["L"] == 1


class TestWarningModes:
    EXPECTED = "Use newFn instead (api.py:10 called by main.py:42, ACME-1, package acme)"

    def test_warn_emit_uses_visible_category(self, registry):
        registry.enable_with_warnings()
        with pytest.warns(DeprecationNotice) as record:
            registry.trigger("acme", "ACME-1", "Use %s instead", "newFn")

        assert len(record) == 1
        assert str(record[0].message) == self.EXPECTED
        assert record[0].filename == "/srv/acme/src/acme/api.py"
        assert record[0].lineno == 10

    def test_warn_suppressed_uses_suppressed_category(self, registry):
        registry.enable_with_suppressed_warnings()
        with pytest.warns(SuppressedDeprecationNotice) as record:
            registry.trigger("acme", "ACME-1", "Use %s instead", "newFn")

        assert str(record[0].message) == self.EXPECTED
        assert issubclass(record[0].category, DeprecationWarning)

    def test_duplicate_does_not_warn_again(self, registry):
        registry.enable_with_warnings()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            registry.trigger("acme", "L", "old")
            registry.trigger("acme", "L", "old")
        assert len(caught) == 1

    def test_missing_frames_are_blank(self, registry):
        registry.frame_provider = StaticFrameProvider()
        registry.enable_with_warnings()
        with pytest.warns(DeprecationNotice) as record:
            registry.trigger("acme", "L", "old")
        assert str(record[0].message) == "old (:0 called by :0, L, package acme)"

    def test_disabled_mode_emits_nothing(self, registry):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            registry.trigger("acme", "L", "old")
        assert caught == []


# ============================================
# trigger_if_called_from_outside()
# ============================================


class TestTriggerIfCalledFromOutside:
    def test_outside_caller_is_reported(self, registry, sink):
        registry.enable_with_logger(sink)
        registry.trigger_if_called_from_outside("acme", "L", "old")
        assert len(sink.records) == 1
        assert registry.get_triggered_deprecations()["L"] == 1

    def test_call_from_same_package_is_ignored(self, sink):
        registry = DeprecationRegistry(
            frame_provider=StaticFrameProvider(
                CallerFrame("/srv/acme/src/acme/api.py", 10, "acme.api"),
                CallerFrame("/srv/acme/src/acme/loader.py", 5, "acme.loader"),
            )
        )
        registry.enable_with_logger(sink)
        registry.trigger_if_called_from_outside("acme", "L", "old")
        assert sink.records == []
        assert "L" not in registry.get_triggered_deprecations()

    def test_similarly_named_package_counts_as_outside(self, sink):
        registry = DeprecationRegistry(
            frame_provider=StaticFrameProvider(
                CallerFrame("/srv/acme/src/acme/api.py", 10, "acme.api"),
                CallerFrame("/srv/acme_ext/plugin.py", 5, "acme_ext.plugin"),
            )
        )
        registry.enable_with_logger(sink)
        registry.trigger_if_called_from_outside("acme", "L", "old")
        assert len(sink.records) == 1


# ============================================
# Thread safety
# ============================================


class TestRegistryThreadSafety:
    def test_concurrent_triggers_report_once(self, registry):
        sink = RecordingSink()
        registry.enable_with_logger(sink)

        def worker():
            for _ in range(200):
                registry.trigger("acme", "L", "old")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.get_triggered_deprecations()["L"] == 1600
        assert len(sink.records) == 1

    def test_concurrent_temporary_suppression_is_exact(self, registry):
        registry.ignore_deprecation_temporarily("L", 500)

        def worker():
            for _ in range(100):
                registry.trigger("acme", "L", "old")

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert registry.get_triggered_deprecations()["L"] == 500


# ============================================
# Process-wide registry
# ============================================


class TestProcessWideRegistry:
    def test_get_registry_returns_same_instance(self, registry):
        assert get_registry() is registry
        assert get_registry() is get_registry()

    def test_set_registry_returns_previous(self, registry):
        other = DeprecationRegistry()
        previous = set_registry(other)
        assert previous is registry
        assert get_registry() is other

    def test_reset_registry_installs_fresh_instance(self, registry):
        registry.trigger("acme", "L", "old")
        fresh = reset_registry()
        assert fresh is not registry
        assert get_registry() is fresh
        assert fresh.get_unique_triggered_deprecations_count() == 0
