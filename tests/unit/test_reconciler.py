"""
Unit tests for core/reconciler.py - TranslationReconciler
"""
import pytest

from core.errors import ExclusionReason, ERROR_CONFIGURATION, ERROR_MISSING_RESULT
from core.records import LanguageSubset, Record
from core.reconciler import ReconciliationReport, ReconciliationStatus, TranslationReconciler
from core.selection import PreferredProviderPolicy


class TestTranslationReconciler:
    """Test multi-provider reconciliation."""

    @pytest.fixture
    def reconciler(self):
        """Reconciler preferring DeepL."""
        return TranslationReconciler(policy=PreferredProviderPolicy(["deepl", "google"]))

    @pytest.mark.asyncio
    async def test_both_providers_succeed(self, reconciler, german_subset, scripted_adapter):
        """Test every record gets a score and the preferred translation."""
        deepl = scripted_adapter("deepl")
        google = scripted_adapter("google")

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert report.status == ReconciliationStatus.COMPLETE
        assert report.resolved_count == 12
        assert report.unresolved == []
        assert len(report.scores) == 12
        assert all(s.provider_a == "deepl" and s.provider_b == "google" for s in report.scores)
        assert report.selection_counts() == {"deepl": 12}
        assert report.mean_similarity is not None

    @pytest.mark.asyncio
    async def test_scenario_b_provider_outage(self, reconciler, german_subset, scripted_adapter):
        """Test one provider failing everything: no scores, all resolved by the survivor."""
        deepl = scripted_adapter("deepl", fail_all=True)
        google = scripted_adapter("google")

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert report.scores == []
        assert report.mean_similarity is None
        assert report.resolved_count == 12
        assert report.unresolved == []
        assert report.selection_counts() == {"google": 12}
        assert report.success_counts() == {"deepl": 0, "google": 12}

    @pytest.mark.asyncio
    async def test_scenario_c_one_record_unresolved(self, reconciler, german_subset, scripted_adapter):
        """Test both providers failing one record: 11 resolved, 1 unresolved."""
        deepl = scripted_adapter("deepl", fail_ids={"de7"})
        google = scripted_adapter("google", fail_ids={"de7"})

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert report.resolved_count == 11
        assert report.unresolved_count == 1
        unresolved = report.unresolved[0]
        assert unresolved.record_id == "de7"
        assert unresolved.reason == ExclusionReason.UNRESOLVED.value == "UnresolvedRecordError"
        assert set(unresolved.errors) == {"deepl", "google"}
        assert "de7" not in report.selections
        assert len(report.scores) == 11

    @pytest.mark.asyncio
    async def test_identical_translations_score_one(self, reconciler, scripted_adapter):
        """Test identical output from both providers scores 1.0."""
        subset = LanguageSubset("fr", [Record(id="f1", text="Bonjour", language="fr")])
        deepl = scripted_adapter("deepl", translations={"f1": "Hello!"})
        google = scripted_adapter("google", translations={"f1": "hello"})

        report = await reconciler.reconcile(subset, [deepl, google], "en")

        assert report.scores[0].value == 1.0
        assert report.low_agreement(0.5) == []

    @pytest.mark.asyncio
    async def test_low_agreement(self, reconciler, scripted_adapter):
        """Test records whose translations share nothing are flagged."""
        subset = LanguageSubset("fr", [Record(id="f1", text="Salut", language="fr")])
        deepl = scripted_adapter("deepl", translations={"f1": "Hi"})
        google = scripted_adapter("google", translations={"f1": "Greetings"})

        report = await reconciler.reconcile(subset, [deepl, google], "en")

        assert report.scores[0].value == 0.0
        assert report.low_agreement(0.5) == ["f1"]

    @pytest.mark.asyncio
    async def test_missing_results_are_failures(self, reconciler, german_subset, scripted_adapter):
        """Test ids a provider silently dropped count as failures for it."""
        deepl = scripted_adapter("deepl", drop_ids={"de1", "de2"})
        google = scripted_adapter("google")

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert report.results["deepl"]["de1"].error_code == ERROR_MISSING_RESULT
        assert report.selections["de1"].provider == "google"
        assert report.selections["de3"].provider == "deepl"
        assert report.resolved_count == 12

    @pytest.mark.asyncio
    async def test_configuration_error_recorded_per_provider(self, reconciler, german_subset, scripted_adapter):
        """Test a misconfigured provider is reported while the other proceeds."""
        deepl = scripted_adapter("deepl", configured=False)
        google = scripted_adapter("google")

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert "deepl" in report.provider_errors
        assert report.results["deepl"]["de1"].error_code == ERROR_CONFIGURATION
        assert report.resolved_count == 12

    @pytest.mark.asyncio
    async def test_unexpected_adapter_exception(self, reconciler, german_subset, scripted_adapter):
        """Test an adapter crash becomes a provider error, not a crash."""
        deepl = scripted_adapter("deepl", raise_error=RuntimeError("socket closed"))
        google = scripted_adapter("google", fail_ids={"de1"})

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert "RuntimeError" in report.provider_errors["deepl"]
        assert report.resolved_count == 11
        assert [u.record_id for u in report.unresolved] == ["de1"]

    @pytest.mark.asyncio
    async def test_all_providers_fail(self, reconciler, german_subset, scripted_adapter):
        """Test a total outage leaves every record unresolved, none dropped."""
        deepl = scripted_adapter("deepl", fail_all=True)
        google = scripted_adapter("google", fail_all=True)

        report = await reconciler.reconcile(german_subset, [deepl, google], "en")

        assert report.is_complete
        assert report.resolved_count == 0
        assert [u.record_id for u in report.unresolved] == german_subset.ids

    @pytest.mark.asyncio
    async def test_three_providers_score_every_pair(self, reconciler, german_subset, scripted_adapter):
        """Test pairwise scores for three providers."""
        adapters = [scripted_adapter(name) for name in ("deepl", "google", "azure")]

        report = await reconciler.reconcile(german_subset, adapters, "en")

        pairs = {(s.provider_a, s.provider_b) for s in report.scores_for("de1")}
        assert pairs == {("deepl", "google"), ("deepl", "azure"), ("google", "azure")}

    @pytest.mark.asyncio
    async def test_adapters_receive_ids_and_languages(self, reconciler, german_subset, scripted_adapter):
        """Test adapters are called once with the full subset."""
        deepl = scripted_adapter("deepl")

        await reconciler.reconcile(german_subset, [deepl], "en-US")

        assert len(deepl.calls) == 1
        call = deepl.calls[0]
        assert call["ids"] == german_subset.ids
        assert call["source"] == "de"
        assert call["target"] == "en"

    @pytest.mark.asyncio
    async def test_empty_subset(self, reconciler, scripted_adapter):
        """Test an empty subset yields an empty complete report without calls."""
        deepl = scripted_adapter("deepl")

        report = await reconciler.reconcile(LanguageSubset("de"), [deepl], "en")

        assert report.is_complete
        assert report.selections == {}
        assert deepl.calls == []

    @pytest.mark.asyncio
    async def test_invalid_similarity_rejected(self, german_subset, scripted_adapter):
        """Test a similarity function outside [0, 1] is rejected."""
        reconciler = TranslationReconciler(similarity_fn=lambda a, b: 2.0)

        with pytest.raises(ValueError):
            await reconciler.reconcile(
                german_subset, [scripted_adapter("deepl"), scripted_adapter("google")], "en"
            )

    @pytest.mark.asyncio
    async def test_requires_adapters(self, reconciler, german_subset):
        """Test reconciling with no adapters is rejected."""
        with pytest.raises(ValueError):
            await reconciler.reconcile(german_subset, [], "en")

    @pytest.mark.asyncio
    async def test_duplicate_provider_names(self, reconciler, german_subset, scripted_adapter):
        """Test two adapters with the same name are rejected."""
        with pytest.raises(ValueError):
            await reconciler.reconcile(german_subset, [scripted_adapter("deepl"), scripted_adapter("deepl")], "en")


class TestReconciliationReport:
    """Test report helpers."""

    def test_incomplete_report(self, german_subset):
        """Test incomplete reports resolve nothing."""
        report = ReconciliationReport.incomplete(german_subset, "en", ["deepl"], note="timeout")

        assert not report.is_complete
        assert report.resolved_records() == []
        assert report.to_dict()["status"] == "incomplete"
        assert report.to_dict()["note"] == "timeout"

    @pytest.mark.asyncio
    async def test_to_dict(self, german_subset, scripted_adapter):
        """Test JSON-ready serialisation."""
        report = await TranslationReconciler().reconcile(
            german_subset, [scripted_adapter("deepl"), scripted_adapter("google")], "en"
        )
        data = report.to_dict(include_results=True)

        assert data["language"] == "de"
        assert data["resolved"] == 12
        assert len(data["scores"]) == 12
        assert len(data["results"]["google"]) == 12
