"""Tests for the processor registry."""

import pytest

from gateway.engine.errors import (
    BankDisabledError,
    NoProcessorsAvailableError,
    ProcessorNotFoundError,
    UnsupportedBankError,
)
from gateway.engine.factory import ProcessorFactory
from gateway.models.enums import BankId, ErrorCode, HealthStatus
from gateway.processors.stripe import StripeProcessor


class TestResolution:
    def test_one_processor_per_bank_in_order(self, factory):
        assert factory.get_supported_banks() == list(BankId)
        assert [p.bank_id for p in factory.get_all_processors()] == list(BankId)

    def test_default_construction_registers_every_bank(self):
        assert ProcessorFactory().get_supported_banks() == list(BankId)

    def test_create_processor_accepts_raw_values(self, factory):
        assert factory.create_processor("stripe") is factory.create_processor(BankId.STRIPE)
        assert isinstance(factory.create_processor("stripe"), StripeProcessor)

    def test_unknown_bank(self, factory):
        with pytest.raises(UnsupportedBankError) as exc:
            factory.create_processor("unknown_bank")
        assert str(exc.value) == "Unsupported bank: unknown_bank. Available: stripe, paypal, square, adyen, braintree"
        assert exc.value.error_code == ErrorCode.INVALID_REQUEST

    def test_disabled_bank_resolves_unless_enabled_required(self, factory):
        factory.disable_processor(BankId.PAYPAL)
        assert factory.create_processor(BankId.PAYPAL).bank_id == BankId.PAYPAL
        with pytest.raises(BankDisabledError) as exc:
            factory.create_processor(BankId.PAYPAL, require_enabled=True)
        assert exc.value.error_code == ErrorCode.SERVICE_UNAVAILABLE

    def test_existence_checked_before_enablement(self, factory):
        with pytest.raises(UnsupportedBankError):
            factory.create_processor("nope", require_enabled=True)

    def test_registered_vs_supported(self, factory):
        factory.disable_processor("square")
        assert factory.is_registered("square") is True
        assert factory.is_supported("square") is False
        assert factory.is_registered("nope") is False
        assert factory.is_supported("nope") is False


class TestEnableDisable:
    def test_disable_then_enable(self, factory):
        factory.disable_processor(BankId.ADYEN)
        assert BankId.ADYEN not in [p.bank_id for p in factory.get_enabled_processors()]
        assert len(factory.get_all_processors()) == 5

        factory.enable_processor(BankId.ADYEN)
        assert factory.is_supported(BankId.ADYEN)

    def test_idempotent(self, factory):
        factory.disable_processor(BankId.STRIPE)
        factory.disable_processor(BankId.STRIPE)
        assert not factory.is_supported(BankId.STRIPE)
        factory.enable_processor(BankId.STRIPE)
        factory.enable_processor(BankId.STRIPE)
        assert factory.is_supported(BankId.STRIPE)

    def test_unknown_processor(self, factory):
        with pytest.raises(ProcessorNotFoundError):
            factory.enable_processor("nope")
        with pytest.raises(ProcessorNotFoundError):
            factory.disable_processor("nope")

    def test_audited(self, factory, caplog):
        with caplog.at_level("INFO", logger="gateway.audit"):
            factory.disable_processor(BankId.BRAINTREE)
        assert "action=processor_disabled" in caplog.text
        assert "bank=braintree" in caplog.text


class TestBestProcessor:
    def test_fastest_enabled(self, factory):
        # Stripe advertises 200ms, the lowest
        assert factory.get_best_processor().bank_id == BankId.STRIPE

    def test_skips_disabled(self, factory):
        factory.disable_processor(BankId.STRIPE)
        # Adyen (300ms) is next
        assert factory.get_best_processor().bank_id == BankId.ADYEN

    def test_excluding(self, factory):
        assert factory.get_best_processor(excluding=["stripe", BankId.ADYEN]).bank_id == BankId.BRAINTREE

    def test_empty_pool(self, factory):
        for bank in BankId:
            factory.disable_processor(bank)
        with pytest.raises(NoProcessorsAvailableError):
            factory.get_best_processor()


class TestProjections:
    def test_summaries(self, factory):
        factory.disable_processor(BankId.PAYPAL)
        summaries = {s["bank_id"]: s for s in factory.get_processor_summaries()}
        assert summaries["paypal"]["enabled"] is False
        assert summaries["paypal"]["protocol"] == "SOAP"
        assert summaries["braintree"]["protocol"] == "GraphQL"
        assert [s["bank_id"] for s in factory.get_processor_summaries(enabled_only=True)] == [
            "stripe", "square", "adyen", "braintree",
        ]

    def test_health_summary(self, factory):
        factory.disable_processor(BankId.SQUARE)
        health = factory.get_health_summary()
        assert health["square"] == HealthStatus.DISABLED
        assert health["stripe"] == HealthStatus.HEALTHY

    def test_statistics(self, factory):
        factory.disable_processor(BankId.PAYPAL)
        stats = factory.get_statistics()
        assert stats["total_processors"] == 5
        assert stats["enabled_processors"] == 4
        assert stats["disabled_processors"] == 1
        # (200 + 500 + 300 + 400) / 4
        assert stats["average_processing_time_ms"] == 350
        assert stats["protocols"] == {"REST": 2, "SOAP": 1, "Custom": 1, "GraphQL": 1}
        assert stats["fastest_processor"] == "stripe"

    def test_projections_do_not_change_state(self, factory):
        before = [p.config.enabled for p in factory.get_all_processors()]
        factory.get_processor_summaries()
        factory.get_health_summary()
        factory.get_statistics()
        assert [p.config.enabled for p in factory.get_all_processors()] == before
