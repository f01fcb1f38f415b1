"""
Tests for FuelRecordLifecycle
"""

from dataclasses import replace
from datetime import date
from types import MappingProxyType

import pytest

from fuel_ledger.errors import (
    InvalidDeliveryOrderError,
    JourneyCompleteError,
    RecordCancelledError,
    RecordLockedError,
    RecordQueuedError,
    ReturnAlreadyAppliedError,
)
from fuel_ledger.models import (
    ActiveGoingRecord,
    CancelledRecord,
    Checkpoint,
    CompletedRecord,
    FuelRecordStatus,
    LockedFuelRecord,
    PendingConfigReason,
    QueuedFuelRecord,
    ReturningRecord,
    record_to_dict,
)
from fuel_ledger.services import determine_journey_start, extract_month


class TestJourneyStart:
    """Test start yard resolution"""

    @pytest.mark.parametrize(
        "loading_point,expected",
        [
            ("DAR", "DAR"),
            ("TANGA PORT", "TANGA"),
            ("moshi", "MOSHI"),
            ("Mombasa", "MOMBASA"),
            ("KISARAWE", "DAR"),
            ("", "DAR"),
            (None, "DAR"),
        ],
    )
    def test_start_yard(self, fuel_config, loading_point, expected):
        """First origin contained in the loading point, else DAR"""
        assert determine_journey_start(loading_point, fuel_config) == expected

    def test_month_label(self):
        """Ledger month is the full month name and year"""
        assert extract_month(date(2025, 11, 14)) == "November 2025"


class TestCreateFromGoingOrder:
    """Test record creation"""

    def test_active_record(self, lifecycle, going_order):
        """Both operands present opens an ACTIVE_GOING record"""
        record = lifecycle.create_from_going_order(going_order, None, 2400, 60)

        assert isinstance(record, ActiveGoingRecord)
        assert record.status == FuelRecordStatus.ACTIVE_GOING
        assert record.balance == 2460
        assert record.total_lts == 2400
        assert record.extra == 60
        assert not record.is_locked
        assert record.return_do is None

    def test_route_fields(self, lifecycle, going_order):
        """start/from/to and originals come from the order"""
        record = lifecycle.create_from_going_order(going_order, None, 2400, 60)

        assert record.start == "DAR"
        assert record.from_location == "DAR"
        assert record.to_location == "KOLWEZI"
        assert record.original_going_from == "DAR"
        assert record.original_going_to == "KOLWEZI"
        assert record.month == "November 2025"
        assert record.going_do == "6449"

    def test_checkpoints_start_empty(self, lifecycle, going_order):
        """No checkpoint is pre-filled"""
        record = lifecycle.create_from_going_order(going_order, None, 2400, 60)

        assert len(record.checkpoints) == len(Checkpoint)
        assert all(liters == 0 for liters in record.checkpoints.values())

    def test_loading_point_argument_overrides_order(self, lifecycle, going_order):
        """An explicit loading point decides the start yard"""
        record = lifecycle.create_from_going_order(going_order, "TANGA", 2400, 60)

        assert record.start == "TANGA"

    @pytest.mark.parametrize(
        "total,extra,reason",
        [
            (None, 60, PendingConfigReason.MISSING_TOTAL_LITERS),
            (2400, None, PendingConfigReason.MISSING_EXTRA_FUEL),
            (None, None, PendingConfigReason.BOTH),
        ],
    )
    def test_locked_record(self, lifecycle, going_order, total, extra, reason):
        """A missing operand locks the record with balance 0"""
        record = lifecycle.create_from_going_order(going_order, None, total, extra)

        assert isinstance(record, LockedFuelRecord)
        assert record.is_locked
        assert record.pending_config_reason == reason
        assert record.balance == 0
        assert all(liters == 0 for liters in record.checkpoints.values())

    def test_export_order_rejected(self, lifecycle, return_order):
        """Only IMPORT orders open a record"""
        with pytest.raises(InvalidDeliveryOrderError):
            lifecycle.create_from_going_order(return_order, None, 2400, 60)


class TestApplyReturnOrder:
    """Test the return transition"""

    def test_kamoa_return(self, lifecycle, active_record, return_order):
        """KAMOA return adds the route difference plus the loading point extra"""
        returning = lifecycle.apply_return_order(active_record, return_order)

        # 2440 - 2400 route difference + 40 KAMOA extra
        assert isinstance(returning, ReturningRecord)
        assert returning.total_lts == 2480
        assert returning.balance == 2540
        assert returning.extra == 60
        assert returning.return_do == "7012"

    def test_direction_reversed(self, lifecycle, active_record, return_order):
        """from becomes the return loading point, to the start yard"""
        returning = lifecycle.apply_return_order(active_record, return_order)

        assert returning.from_location == "KAMOA"
        assert returning.to_location == "DAR"
        assert returning.original_going_from == "DAR"
        assert returning.original_going_to == "KOLWEZI"

    def test_checkpoints_untouched(self, lifecycle, make_record, return_order):
        """Previously fulfilled checkpoints survive the transition"""
        record = make_record(checkpoints={Checkpoint.DAR_YARD: 550.0})

        returning = lifecycle.apply_return_order(record, return_order)

        assert returning.checkpoint(Checkpoint.DAR_YARD) == 550
        assert returning.checkpoint(Checkpoint.ZAMBIA_RETURN) == 0

    def test_original_record_unchanged(self, lifecycle, active_record, return_order):
        """Transitions return a new record"""
        lifecycle.apply_return_order(active_record, return_order)

        assert active_record.total_lts == 2400
        assert active_record.return_do is None

    def test_total_never_decreases(self, lifecycle, active_record, make_order):
        """A cheaper return route adds nothing"""
        order = make_order(doNumber="7013", importOrExport="EXPORT", destination="LIKASI")

        returning = lifecycle.apply_return_order(active_record, order)

        assert returning.total_lts == 2400
        assert returning.balance == 2460

    def test_coastal_start_extra(self, lifecycle, make_record, make_order):
        """Journeys that started at a coastal yard get the cluster extra"""
        record = make_record(start="MOSHI")
        order = make_order(doNumber="7014", importOrExport="EXPORT", destination="LIKASI")

        returning = lifecycle.apply_return_order(record, order)

        assert returning.total_lts == 2400 + 170
        assert returning.to_location == "MOSHI"

    def test_second_application_rejected(self, lifecycle, active_record, return_order):
        """Applying a return twice raises and changes nothing"""
        returning = lifecycle.apply_return_order(active_record, return_order)

        with pytest.raises(ReturnAlreadyAppliedError) as exc_info:
            lifecycle.apply_return_order(returning, return_order)

        assert exc_info.value.truck_no == "T664 ECQ"
        assert returning.total_lts == 2480
        assert returning.balance == 2540

    def test_completed_record_rejected(self, lifecycle, settled_record, return_order):
        """Completed journeys cannot take a return order"""
        completed = lifecycle.settle(settled_record)

        with pytest.raises(ReturnAlreadyAppliedError):
            lifecycle.apply_return_order(completed, return_order)

    def test_locked_record_rejected(self, lifecycle, going_order, return_order):
        """Locked records must be configured first"""
        locked = lifecycle.create_from_going_order(going_order, None, None, 60)

        with pytest.raises(RecordLockedError):
            lifecycle.apply_return_order(locked, return_order)

    def test_cancelled_record_rejected(self, lifecycle, active_record, return_order):
        """Cancelled records are frozen"""
        cancelled = lifecycle.cancel(active_record, "duplicate order")

        with pytest.raises(RecordCancelledError):
            lifecycle.apply_return_order(cancelled, return_order)

    def test_import_order_rejected(self, lifecycle, active_record, going_order):
        """Only EXPORT orders are applied as returns"""
        with pytest.raises(InvalidDeliveryOrderError):
            lifecycle.apply_return_order(active_record, going_order)

    def test_adjustment_returned_with_record(self, lifecycle, active_record, return_order):
        """The combined call reports the adjustment it applied"""
        returning, adjustment = lifecycle.apply_return_with_adjustment(
            active_record, return_order
        )

        assert adjustment.additional_fuel_needed == 80
        assert returning.total_lts == adjustment.new_total_liters


class TestReturnAdjustment:
    """Test the return fuel breakdown"""

    def test_breakdown(self, lifecycle, make_record, return_order):
        """Every component of the added fuel is reported"""
        record = make_record(start="MSA")

        adjustment = lifecycle.calculate_return_adjustment(record, return_order)

        assert adjustment.original_total_liters == 2400
        assert adjustment.required_total_liters == 2440
        assert adjustment.fuel_difference == 40
        assert adjustment.loading_point_extra == 40
        assert adjustment.destination_extra == 170
        assert adjustment.additional_fuel_needed == 250
        assert adjustment.new_total_liters == 2650
        assert adjustment.return_loading_point == "KAMOA"
        assert adjustment.final_destination == "MSA"
        assert adjustment.route_match.matched

    def test_unknown_return_destination(self, lifecycle, active_record, make_order):
        """Unknown return destinations fall back to the default total"""
        order = make_order(importOrExport="EXPORT", destination="NOWHERE")

        adjustment = lifecycle.calculate_return_adjustment(active_record, order)

        assert not adjustment.route_match.matched
        assert adjustment.fuel_difference == 0


class TestCompletion:
    """Test is_complete / is_on_going_leg"""

    def test_complete(self, lifecycle, settled_record):
        """Balance 0 and terminal checkpoint filled is complete"""
        assert lifecycle.is_complete(settled_record)

    def test_balance_not_zero(self, lifecycle, make_record):
        """Remaining balance is not complete"""
        record = make_record(balance=10.0, checkpoints={Checkpoint.MBEYA_RETURN: 400.0})

        assert not lifecycle.is_complete(record)

    def test_negative_balance(self, lifecycle, make_record):
        """Negative balance is an open state, not complete"""
        record = make_record(balance=-100.0, checkpoints={Checkpoint.MBEYA_RETURN: 400.0})

        assert not lifecycle.is_complete(record)

    def test_terminal_checkpoint_unset(self, lifecycle, make_record):
        """Balance 0 without the terminal checkpoint is not complete"""
        assert not lifecycle.is_complete(make_record(balance=0.0))

    def test_coastal_terminal_checkpoint(self, lifecycle, make_record):
        """Coastal journeys finish at tangaReturn"""
        wrong = make_record(
            destination="MSA", balance=0.0, checkpoints={Checkpoint.MBEYA_RETURN: 400.0}
        )
        right = make_record(
            destination="MSA", balance=0.0, checkpoints={Checkpoint.TANGA_RETURN: 70.0}
        )

        assert lifecycle.terminal_checkpoint(right) == Checkpoint.TANGA_RETURN
        assert not lifecycle.is_complete(wrong)
        assert lifecycle.is_complete(right)

    def test_cancelled_never_complete(self, lifecycle, settled_record):
        """Cancelled records are never complete"""
        assert not lifecycle.is_complete(lifecycle.cancel(settled_record))

    def test_on_going_leg(self, lifecycle, active_record, settled_record):
        """Going leg lasts until the terminal checkpoint is filled"""
        assert lifecycle.is_on_going_leg(active_record)
        assert not lifecycle.is_on_going_leg(settled_record)

    def test_on_going_leg_ignores_return_do(self, lifecycle, active_record, return_order):
        """A filed return order alone does not end the going leg"""
        returning = lifecycle.apply_return_order(active_record, return_order)

        assert lifecycle.is_on_going_leg(returning)


class TestFindOpenGoingRecord:
    """Test open record lookup"""

    def test_most_recent_open(self, lifecycle, make_record):
        """The latest record without a return DO wins"""
        older = make_record(record_date=date(2025, 10, 1), going_do="1")
        newer = make_record(record_date=date(2025, 11, 1), going_do="2")
        other_truck = make_record(truck_no="T1 DXY", record_date=date(2025, 12, 1))

        found = lifecycle.find_open_going_record("t664  ecq", [older, newer, other_truck])

        assert found is newer

    def test_returning_records_skipped(self, lifecycle, make_record, return_order):
        """Records with a return DO are not open"""
        open_record = make_record(record_date=date(2025, 10, 1), going_do="1")
        returned = lifecycle.apply_return_order(
            make_record(record_date=date(2025, 11, 1), going_do="2"), return_order
        )

        assert lifecycle.find_open_going_record("T664 ECQ", [open_record, returned]) is open_record

    def test_cancelled_records_skipped(self, lifecycle, active_record):
        """Cancelled records are not open"""
        cancelled = lifecycle.cancel(active_record)

        assert lifecycle.find_open_going_record("T664 ECQ", [cancelled]) is None

    def test_none_when_absent(self, lifecycle):
        """No record is a normal None result"""
        assert lifecycle.find_open_going_record("T664 ECQ", []) is None


class TestSettle:
    """Test promotion to COMPLETE"""

    def test_settles_complete_record(self, lifecycle, settled_record):
        """Complete records become CompletedRecord"""
        completed = lifecycle.settle(settled_record)

        assert isinstance(completed, CompletedRecord)
        assert completed.status == FuelRecordStatus.COMPLETE
        assert completed.checkpoint(Checkpoint.MBEYA_RETURN) == 400

    def test_incomplete_record_unchanged(self, lifecycle, active_record):
        """Incomplete records are returned as they are"""
        assert lifecycle.settle(active_record) is active_record

    def test_cancelled_rejected(self, lifecycle, settled_record):
        """Cancelled records cannot be settled"""
        with pytest.raises(RecordCancelledError):
            lifecycle.settle(lifecycle.cancel(settled_record))


class TestResolvePendingConfig:
    """Test configuring locked records"""

    def test_partial_configuration_stays_locked(self, lifecycle, going_order):
        """Still missing extra fuel keeps the record locked"""
        locked = lifecycle.create_from_going_order(going_order, None, None, None)

        still_locked = lifecycle.resolve_pending_config(locked, total_liters=2400)

        assert isinstance(still_locked, LockedFuelRecord)
        assert still_locked.pending_config_reason == PendingConfigReason.MISSING_EXTRA_FUEL
        assert still_locked.total_lts == 2400

    def test_full_configuration_activates(self, lifecycle, going_order):
        """Both operands present unlock the record"""
        locked = lifecycle.create_from_going_order(going_order, None, None, 60)

        active = lifecycle.resolve_pending_config(locked, total_liters=2400)

        assert isinstance(active, ActiveGoingRecord)
        assert active.balance == 2460
        assert active.original_going_to == "KOLWEZI"

    def test_unlock_deducts_fulfilled_checkpoints(self, lifecycle, going_order):
        """Checkpoints filled while locked count against the new balance"""
        locked = lifecycle.create_from_going_order(going_order, None, 2400, None)
        fulfilled = replace(
            locked,
            checkpoints=MappingProxyType({**locked.checkpoints, Checkpoint.DAR_YARD: 550.0}),
        )

        active = lifecycle.resolve_pending_config(fulfilled, extra=100)

        assert isinstance(active, ActiveGoingRecord)
        assert active.balance == 2400 + 100 - 550
        assert active.checkpoint(Checkpoint.DAR_YARD) == 550

    def test_legacy_negative_entry_counts(self, lifecycle, going_order):
        """Negative checkpoint entries are consumption too"""
        locked = lifecycle.create_from_going_order(going_order, None, None, 60)
        fulfilled = replace(
            locked,
            checkpoints=MappingProxyType({**locked.checkpoints, Checkpoint.MBEYA_GOING: -450.0}),
        )

        active = lifecycle.resolve_pending_config(fulfilled, total_liters=2400)

        assert active.balance == 2400 + 60 - 450

    def test_active_record_unchanged(self, lifecycle, active_record):
        """Configured records are returned as they are"""
        assert lifecycle.resolve_pending_config(active_record, 2200, 0) is active_record

    def test_completed_rejected(self, lifecycle, settled_record):
        """Completed journeys cannot be reconfigured"""
        with pytest.raises(JourneyCompleteError):
            lifecycle.resolve_pending_config(lifecycle.settle(settled_record), 2400, 60)

    def test_cancelled_rejected(self, lifecycle, going_order):
        """Cancelled records cannot be reconfigured"""
        locked = lifecycle.create_from_going_order(going_order, None, None, None)

        with pytest.raises(RecordCancelledError):
            lifecycle.resolve_pending_config(lifecycle.cancel(locked), 2400, 60)


class TestCancel:
    """Test cancellation"""

    def test_cancel_active(self, lifecycle, active_record):
        """Cancelled record keeps a snapshot of its prior state"""
        cancelled = lifecycle.cancel(active_record, "order withdrawn")

        assert isinstance(cancelled, CancelledRecord)
        assert cancelled.status == FuelRecordStatus.CANCELLED
        assert cancelled.cancelled_from == FuelRecordStatus.ACTIVE_GOING
        assert cancelled.cancellation_reason == "order withdrawn"
        assert cancelled.balance == active_record.balance

    def test_cancel_locked(self, lifecycle, going_order):
        """Locked records can be cancelled"""
        locked = lifecycle.create_from_going_order(going_order, None, None, 60)

        cancelled = lifecycle.cancel(locked)

        assert cancelled.cancelled_from == FuelRecordStatus.LOCKED_PENDING_CONFIG
        assert cancelled.total_lts is None

    def test_cancel_twice_rejected(self, lifecycle, active_record):
        """A cancelled record cannot be cancelled again"""
        cancelled = lifecycle.cancel(active_record)

        with pytest.raises(RecordCancelledError) as exc_info:
            lifecycle.cancel(cancelled)

        assert exc_info.value.status == "CANCELLED"


class TestJourneyQueue:
    """Test queueing going orders behind a journey in progress"""

    def test_queued_behind_active(self, lifecycle, active_record, busy_order):
        """A going order for a busy truck is queued, not opened"""
        record = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        assert isinstance(record, QueuedFuelRecord)
        assert record.status == FuelRecordStatus.QUEUED
        assert record.queue_order == 1
        assert record.waiting_for == "6449"
        assert record.balance == 2460
        assert not record.is_locked

    def test_queue_positions(self, lifecycle, active_record, busy_order):
        """Each further order goes to the back of the queue"""
        first = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )
        second = lifecycle.create_from_going_order(
            busy_order("6501", 21), None, 2400, 60, existing_records=[active_record, first]
        )

        assert second.queue_order == 2

    def test_locked_and_returning_journeys_hold_the_truck(
        self, lifecycle, going_order, active_record, return_order, busy_order
    ):
        """Locked and returning records are journeys in progress"""
        locked = lifecycle.create_from_going_order(going_order, None, None, 60)
        returning = lifecycle.apply_return_order(active_record, return_order)

        for current in (locked, returning):
            record = lifecycle.create_from_going_order(
                busy_order("6500", 20), None, 2400, 60, existing_records=[current]
            )
            assert isinstance(record, QueuedFuelRecord)

    def test_finished_journeys_do_not_hold_the_truck(
        self, lifecycle, active_record, settled_record, busy_order
    ):
        """Completed, cancelled and other trucks' records are ignored"""
        records = [
            lifecycle.settle(settled_record),
            lifecycle.cancel(active_record),
            replace(active_record, truck_no="T1 DXY"),
        ]

        record = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=records
        )

        assert isinstance(record, ActiveGoingRecord)

    def test_queued_unconfigured_reports_reason(self, lifecycle, active_record, busy_order):
        """A queued record may still wait for configuration"""
        record = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, None, 60, existing_records=[active_record]
        )

        assert record.is_locked
        assert record.pending_config_reason == PendingConfigReason.MISSING_TOTAL_LITERS
        assert record.balance == 0

    def test_return_rejected(self, lifecycle, active_record, busy_order, return_order):
        """Queued records cannot take a return order"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        with pytest.raises(RecordQueuedError):
            lifecycle.apply_return_order(queued, return_order)

    def test_not_open_for_returns(self, lifecycle, active_record, busy_order):
        """Return lookup skips queued records"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        found = lifecycle.find_open_going_record("T664 ECQ", [active_record, queued])

        assert found is active_record
        assert lifecycle.find_open_going_record("T664 ECQ", [queued]) is None

    def test_configuration_keeps_queue_place(self, lifecycle, active_record, busy_order):
        """Resolving configuration of a queued record leaves it queued"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, None, None, existing_records=[active_record]
        )

        configured = lifecycle.resolve_pending_config(queued, 2400, 60)

        assert isinstance(configured, QueuedFuelRecord)
        assert configured.queue_order == 1
        assert configured.balance == 2460

    def test_never_complete(self, lifecycle, active_record, busy_order):
        """Queued records are not complete and settle leaves them alone"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        assert not lifecycle.is_complete(queued)
        assert lifecycle.settle(queued) is queued

    def test_cancel_queued(self, lifecycle, active_record, busy_order):
        """Queued records can be cancelled"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        cancelled = lifecycle.cancel(queued, "customer withdrew")

        assert cancelled.cancelled_from == FuelRecordStatus.QUEUED

    def test_ledger_row(self, lifecycle, active_record, busy_order):
        """The ledger row carries the queue position"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        row = record_to_dict(queued)

        assert row["status"] == "QUEUED"
        assert row["queueOrder"] == 1
        assert record_to_dict(active_record)["queueOrder"] is None


class TestAdvanceQueue:
    """Test handing the truck to the next queued journey"""

    @pytest.fixture
    def queue(self, lifecycle, settled_record, busy_order):
        first = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2200, 60, existing_records=[settled_record]
        )
        second = lifecycle.create_from_going_order(
            busy_order("6501", 21), None, None, 60, existing_records=[settled_record, first]
        )
        third = lifecycle.create_from_going_order(
            busy_order("6502", 22),
            None,
            2400,
            60,
            existing_records=[settled_record, first, second],
        )
        return first, second, third

    def test_blocked_while_journey_in_progress(self, lifecycle, settled_record, queue):
        """Nothing moves while the current journey holds the truck"""
        advance = lifecycle.advance_queue("T664 ECQ", [settled_record, *queue])

        assert advance.activated is None
        assert advance.requeued == ()
        assert advance.changed == []

    def test_empty_queue(self, lifecycle, settled_record):
        """No queued journey is a normal empty result"""
        advance = lifecycle.advance_queue("T664 ECQ", [lifecycle.settle(settled_record)])

        assert advance.activated is None

    def test_settle_activates_first_in_line(self, lifecycle, settled_record, queue):
        """Completing the journey activates queue position 1 and renumbers the rest"""
        first, second, third = queue

        completed, advance = lifecycle.settle_and_advance(
            settled_record, [settled_record, third, first, second]
        )

        assert isinstance(completed, CompletedRecord)
        assert isinstance(advance.activated, ActiveGoingRecord)
        assert advance.activated.going_do == "6500"
        assert advance.activated.balance == 2260
        assert [(r.going_do, r.queue_order) for r in advance.requeued] == [
            ("6501", 1),
            ("6502", 2),
        ]
        assert all(r.waiting_for == "6500" for r in advance.requeued)
        assert len(advance.changed) == 3

    def test_unconfigured_journey_activates_locked(self, lifecycle, settled_record, queue):
        """A queued record still missing configuration activates as locked"""
        _, second, third = queue

        advance = lifecycle.advance_queue(
            "T664 ECQ", [lifecycle.settle(settled_record), second, third]
        )

        assert isinstance(advance.activated, LockedFuelRecord)
        assert advance.activated.pending_config_reason == PendingConfigReason.MISSING_TOTAL_LITERS
        assert [r.queue_order for r in advance.requeued] == [1]

    def test_incomplete_journey_does_not_advance(self, lifecycle, active_record, busy_order):
        """An unfinished journey keeps the queue waiting"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        record, advance = lifecycle.settle_and_advance(active_record, [active_record, queued])

        assert record is active_record
        assert advance.activated is None

    def test_advance_after_cancellation(self, lifecycle, active_record, busy_order):
        """A cancelled journey frees the truck for the queue"""
        queued = lifecycle.create_from_going_order(
            busy_order("6500", 20), None, 2400, 60, existing_records=[active_record]
        )

        advance = lifecycle.advance_queue("T664 ECQ", [lifecycle.cancel(active_record), queued])

        assert advance.activated.going_do == "6500"
        assert advance.activated.status == FuelRecordStatus.ACTIVE_GOING
