"""
Fuel Record Lifecycle

State machine for one truck's round-trip fuel ledger.

    IMPORT order ──► LOCKED_PENDING_CONFIG ──(config resolved)──┐
                 └─► ACTIVE_GOING ◄─────────────────────────────┘
                         │ EXPORT order (applied at most once)
                         ▼
                     ACTIVE_RETURNING ──(balance 0, terminal checkpoint filled)──► COMPLETE

    IMPORT order while the truck is still on a journey ──► QUEUED
    QUEUED ──(earlier journey complete, first in line)──► ACTIVE_GOING / LOCKED

    Any non-cancelled record can be cancelled; a CANCELLED record rejects
    every further call.

Every transition returns a NEW record; records are never mutated. The caller
owns persistence and must serialize find_open_going_record -> apply_return_order
per truck.

Author: Fuel Ledger Team
"""

import datetime as dt
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterable, List, Optional, Tuple

import structlog

from ..config import FuelSystemConfig
from ..errors import (
    InvalidDeliveryOrderError,
    JourneyCompleteError,
    RecordCancelledError,
    RecordLockedError,
    RecordQueuedError,
    ReturnAlreadyAppliedError,
)
from ..models.allocation import Checkpoint, RouteMatch, empty_checkpoints
from ..models.delivery_order import DeliveryOrder
from ..models.fuel_record import (
    ActiveGoingRecord,
    CancelledRecord,
    CompletedRecord,
    FuelRecord,
    LockedFuelRecord,
    QueuedFuelRecord,
    ReturningRecord,
    common_fields,
    configured_balance,
    pending_reason_for,
)
from .matching import normalize_key
from .route_resolver import RouteConfigResolver

logger = structlog.get_logger()

# Records that hold the truck: a new going order queues behind them
_ON_JOURNEY = (LockedFuelRecord, ActiveGoingRecord, ReturningRecord)


def extract_month(date: dt.date) -> str:
    """Ledger month label, e.g. "November 2025" """
    return date.strftime("%B %Y")


def determine_journey_start(loading_point: Optional[str], config: FuelSystemConfig) -> str:
    """
    Yard the journey starts from: the first configured origin contained in
    the loading point text ("TANGA PORT" -> TANGA), else the primary yard.
    """
    normalized = normalize_key(loading_point)
    for origin in config.origins:
        if origin and origin in normalized:
            return origin
    return config.primary_yard


def _same_truck(record: FuelRecord, wanted: str) -> bool:
    return normalize_key(record.truck_no) == wanted


@dataclass(frozen=True)
class ReturnFuelAdjustment:
    """Breakdown of the fuel added to a record when its return order arrives"""

    original_total_liters: float
    required_total_liters: float
    fuel_difference: float
    loading_point_extra: float
    destination_extra: float
    additional_fuel_needed: float
    new_total_liters: float
    return_loading_point: str
    final_destination: str
    route_match: RouteMatch


@dataclass(frozen=True)
class QueueAdvance:
    """Records changed when a truck's next queued journey takes over"""

    activated: Optional[FuelRecord] = None
    requeued: Tuple[QueuedFuelRecord, ...] = ()

    @property
    def changed(self) -> List[FuelRecord]:
        records: List[FuelRecord] = [self.activated] if self.activated else []
        return records + list(self.requeued)


class FuelRecordLifecycle:
    """
    Creates fuel records and moves them through their states.

    Example Usage:
        lifecycle = FuelRecordLifecycle(config)
        record = lifecycle.create_from_going_order(order, None, 2400, 100)
        record = lifecycle.apply_return_order(record, export_order)
    """

    def __init__(
        self,
        config: FuelSystemConfig,
        route_resolver: Optional[RouteConfigResolver] = None,
    ):
        self.config = config
        self.route_resolver = route_resolver or RouteConfigResolver(config)

    # ═══════════════════════════════════════════════════════════════════════
    # CREATION
    # ═══════════════════════════════════════════════════════════════════════

    def create_from_going_order(
        self,
        order: DeliveryOrder,
        loading_point: Optional[str] = None,
        total_liters: Optional[float] = None,
        extra: Optional[float] = None,
        existing_records: Iterable[FuelRecord] = (),
    ) -> FuelRecord:
        """
        Open a ledger for an IMPORT order.

        Args:
            order: Going delivery order
            loading_point: Loading point text; defaults to the order's own
            total_liters: Route liters, None when the route is unconfigured
            extra: Truck bonus, None when the truck is in no batch
            existing_records: The truck's known records; a journey still in
                progress among them queues the new record behind it

        Returns:
            QueuedFuelRecord when the truck is still on a journey, else an
            ActiveGoingRecord with balance = total + extra, or a
            LockedFuelRecord (balance 0) when an operand is missing

        Raises:
            InvalidDeliveryOrderError: order is an EXPORT order
        """
        if not order.is_import:
            raise InvalidDeliveryOrderError(
                f"Cannot open a fuel record from a {order.import_or_export.value} order",
                do_number=order.do_number,
            )

        start = determine_journey_start(loading_point or order.loading_point, self.config)
        base = dict(
            truck_no=order.truck_no,
            date=order.date,
            month=extract_month(order.date),
            going_do=order.do_number,
            start=start,
            from_location=start,
            to_location=order.destination,
            original_going_from=start,
            original_going_to=order.destination,
            checkpoints=MappingProxyType(empty_checkpoints()),
        )

        existing_records = list(existing_records)
        current = self.current_journey(order.truck_no, existing_records)
        if current is not None:
            position = len(self.queued_journeys(order.truck_no, existing_records)) + 1
            logger.info(
                "Fuel record queued behind active journey",
                truck_no=order.truck_no,
                do_number=order.do_number,
                waiting_for=current.going_do,
                queue_order=position,
            )
            return QueuedFuelRecord(
                **base,
                total_lts=total_liters,
                extra=extra,
                queue_order=position,
                waiting_for=current.going_do,
            )

        reason = pending_reason_for(total_liters, extra)
        if reason is not None:
            logger.warning(
                "Fuel record locked pending configuration",
                truck_no=order.truck_no,
                do_number=order.do_number,
                destination=order.destination,
                reason=reason.value,
            )
            return LockedFuelRecord(
                **base,
                total_lts=total_liters,
                extra=extra,
                pending_config_reason=reason,
            )

        logger.info(
            "Fuel record opened",
            truck_no=order.truck_no,
            do_number=order.do_number,
            start=start,
            destination=order.destination,
            total_liters=total_liters,
            extra=extra,
        )
        return ActiveGoingRecord(
            **base,
            total_lts=total_liters,
            extra=extra,
            balance=total_liters + extra,
        )

    def resolve_pending_config(
        self,
        record: FuelRecord,
        total_liters: Optional[float] = None,
        extra: Optional[float] = None,
    ) -> FuelRecord:
        """
        Fill in the configuration a locked record was waiting for.

        Operands left as None keep the record's current value. The record
        stays locked while an operand is still missing; otherwise it becomes
        ACTIVE_GOING with balance = total + extra minus the checkpoints
        already fulfilled while it was locked. Queued records take the
        values and stay queued. Already-configured active records are
        returned unchanged.
        """
        self._reject_cancelled(record, "resolve configuration of")
        if isinstance(record, CompletedRecord):
            raise JourneyCompleteError(
                "Cannot reconfigure a completed journey",
                truck_no=record.truck_no,
                status=record.status.value,
            )
        if not isinstance(record, (LockedFuelRecord, QueuedFuelRecord)):
            return record

        new_total = total_liters if total_liters is not None else record.total_lts
        new_extra = extra if extra is not None else record.extra

        if isinstance(record, QueuedFuelRecord):
            return replace(record, total_lts=new_total, extra=new_extra)

        base = common_fields(record)
        reason = pending_reason_for(new_total, new_extra)
        if reason is not None:
            return LockedFuelRecord(
                **base, total_lts=new_total, extra=new_extra, pending_config_reason=reason
            )

        balance = configured_balance(new_total, new_extra, record.checkpoints)
        logger.info(
            "Locked fuel record configured",
            truck_no=record.truck_no,
            total_liters=new_total,
            extra=new_extra,
            balance=balance,
        )
        return ActiveGoingRecord(**base, total_lts=new_total, extra=new_extra, balance=balance)

    # ═══════════════════════════════════════════════════════════════════════
    # RETURN LEG
    # ═══════════════════════════════════════════════════════════════════════

    def calculate_return_adjustment(
        self, record: FuelRecord, return_order: DeliveryOrder
    ) -> ReturnFuelAdjustment:
        """
        Fuel to add when the truck picks up its return load. Pure: the
        record is not touched.

        The total never decreases: a return destination needing fewer liters
        than the going route adds nothing.
        """
        route_match = self.route_resolver.resolve_total_liters(return_order.destination)
        original = record.total_lts or 0.0
        difference = max(0.0, route_match.liters - original)
        loading_extra = self.route_resolver.resolve_loading_point_extra(
            return_order.destination
        )
        destination_extra = self.route_resolver.resolve_destination_cluster_extra(
            record.start
        )
        additional = difference + loading_extra + destination_extra

        return ReturnFuelAdjustment(
            original_total_liters=original,
            required_total_liters=route_match.liters,
            fuel_difference=difference,
            loading_point_extra=loading_extra,
            destination_extra=destination_extra,
            additional_fuel_needed=additional,
            new_total_liters=original + additional,
            return_loading_point=return_order.destination,
            final_destination=record.start,
            route_match=route_match,
        )

    def apply_return_order(
        self, record: FuelRecord, return_order: DeliveryOrder
    ) -> ReturningRecord:
        """
        Attach an EXPORT order to an ACTIVE_GOING record.

        Must happen at most once per record. Return checkpoints are left as
        they are (fulfillment happens outside this engine).

        Raises:
            InvalidDeliveryOrderError: order is not an EXPORT order
            RecordCancelledError: record is cancelled
            RecordLockedError: record still waits for configuration
            RecordQueuedError: record waits for an earlier journey
            ReturnAlreadyAppliedError: record is already returning or complete
        """
        returning, _ = self.apply_return_with_adjustment(record, return_order)
        return returning

    def apply_return_with_adjustment(
        self, record: FuelRecord, return_order: DeliveryOrder
    ) -> Tuple[ReturningRecord, ReturnFuelAdjustment]:
        """apply_return_order, also handing back the adjustment it applied"""
        self._check_can_return(record, return_order)

        adjustment = self.calculate_return_adjustment(record, return_order)
        base = common_fields(record)
        base.update(
            from_location=return_order.destination,
            to_location=record.start,
        )

        logger.info(
            "Return order applied",
            truck_no=record.truck_no,
            return_do=return_order.do_number,
            return_from=return_order.destination,
            fuel_difference=adjustment.fuel_difference,
            loading_point_extra=adjustment.loading_point_extra,
            destination_extra=adjustment.destination_extra,
            additional_fuel=adjustment.additional_fuel_needed,
        )
        returning = ReturningRecord(
            **base,
            total_lts=record.total_lts + adjustment.additional_fuel_needed,
            extra=record.extra,
            balance=record.balance + adjustment.additional_fuel_needed,
            return_do=return_order.do_number,
        )
        return returning, adjustment

    def _check_can_return(self, record: FuelRecord, return_order: DeliveryOrder) -> None:
        self._reject_cancelled(record, "apply a return order to")
        if isinstance(record, LockedFuelRecord):
            raise RecordLockedError(
                "Resolve the pending configuration before applying a return order",
                truck_no=record.truck_no,
                status=record.status.value,
            )
        if isinstance(record, QueuedFuelRecord):
            raise RecordQueuedError(
                f"Journey is queued behind going DO {record.waiting_for}",
                truck_no=record.truck_no,
                status=record.status.value,
            )
        if isinstance(record, (ReturningRecord, CompletedRecord)):
            raise ReturnAlreadyAppliedError(
                f"Return order already applied (return DO {record.return_do})",
                truck_no=record.truck_no,
                status=record.status.value,
            )
        if not return_order.is_export:
            raise InvalidDeliveryOrderError(
                f"Cannot apply a {return_order.import_or_export.value} order as a return",
                do_number=return_order.do_number,
            )

    # ═══════════════════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════════════════

    def terminal_checkpoint(self, record: FuelRecord) -> Checkpoint:
        """tangaReturn for coastal going destinations, mbeyaReturn otherwise"""
        if self.route_resolver.is_coastal_destination(record.going_destination):
            return Checkpoint.TANGA_RETURN
        return Checkpoint.MBEYA_RETURN

    def is_complete(self, record: FuelRecord) -> bool:
        """Balance exactly 0 AND the terminal return checkpoint filled"""
        if isinstance(record, (CancelledRecord, LockedFuelRecord, QueuedFuelRecord)):
            return False
        if record.balance != 0:
            return False
        return record.checkpoint(self.terminal_checkpoint(record)) != 0

    def is_on_going_leg(self, record: FuelRecord) -> bool:
        """Terminal checkpoint still empty, whether or not a return DO exists"""
        return record.checkpoint(self.terminal_checkpoint(record)) == 0

    @staticmethod
    def find_open_going_record(
        truck_no: str, records: Iterable[FuelRecord]
    ) -> Optional[FuelRecord]:
        """Most recent record of the truck without a return DO, or None"""
        wanted = normalize_key(truck_no)
        open_records = [
            record
            for record in records
            if _same_truck(record, wanted)
            and record.return_do is None
            and not isinstance(record, (CancelledRecord, QueuedFuelRecord))
        ]
        if not open_records:
            return None
        return max(open_records, key=lambda record: record.date)

    @staticmethod
    def current_journey(
        truck_no: str, records: Iterable[FuelRecord]
    ) -> Optional[FuelRecord]:
        """The truck's journey in progress (locked, going or returning), or None"""
        wanted = normalize_key(truck_no)
        on_journey = [
            record
            for record in records
            if _same_truck(record, wanted) and isinstance(record, _ON_JOURNEY)
        ]
        if not on_journey:
            return None
        return max(on_journey, key=lambda record: record.date)

    @staticmethod
    def queued_journeys(
        truck_no: str, records: Iterable[FuelRecord]
    ) -> List[QueuedFuelRecord]:
        """The truck's queued records, first in line first"""
        wanted = normalize_key(truck_no)
        queued = [
            record
            for record in records
            if _same_truck(record, wanted) and isinstance(record, QueuedFuelRecord)
        ]
        return sorted(queued, key=lambda record: (record.queue_order, record.date))

    # ═══════════════════════════════════════════════════════════════════════
    # TERMINAL TRANSITIONS
    # ═══════════════════════════════════════════════════════════════════════

    def settle(self, record: FuelRecord) -> FuelRecord:
        """Promote a record that satisfies is_complete to COMPLETE"""
        self._reject_cancelled(record, "settle")
        if not isinstance(record, (ActiveGoingRecord, ReturningRecord)):
            return record
        if not self.is_complete(record):
            return record

        logger.info("Journey complete", truck_no=record.truck_no, going_do=record.going_do)
        return CompletedRecord(
            **common_fields(record),
            total_lts=record.total_lts,
            extra=record.extra,
            balance=record.balance,
            return_do=record.return_do,
        )

    def advance_queue(self, truck_no: str, records: Iterable[FuelRecord]) -> QueueAdvance:
        """
        Activate the truck's first queued journey once nothing else holds the
        truck, and renumber the rest of the queue from 1.

        Returns an empty QueueAdvance while a journey is still in progress or
        nothing is queued.
        """
        records = list(records)
        if self.current_journey(truck_no, records) is not None:
            return QueueAdvance()

        queued = self.queued_journeys(truck_no, records)
        if not queued:
            logger.info("No queued journeys", truck_no=truck_no)
            return QueueAdvance()

        head, rest = queued[0], queued[1:]
        activated = self._activate(head)
        requeued = tuple(
            replace(record, queue_order=position, waiting_for=head.going_do)
            for position, record in enumerate(rest, start=1)
        )
        logger.info(
            "Queued journey activated",
            truck_no=head.truck_no,
            going_do=head.going_do,
            was_position=head.queue_order,
            status=activated.status.value,
            remaining=len(requeued),
        )
        return QueueAdvance(activated=activated, requeued=requeued)

    def settle_and_advance(
        self, record: FuelRecord, records: Iterable[FuelRecord]
    ) -> Tuple[FuelRecord, QueueAdvance]:
        """
        settle(record); when that completes the journey, hand the truck to
        its next queued journey. `records` are the truck's other records
        (the record being settled is ignored if present).
        """
        settled = self.settle(record)
        if not isinstance(settled, CompletedRecord) or settled is record:
            return settled, QueueAdvance()

        others = [other for other in records if other != record]
        return settled, self.advance_queue(settled.truck_no, others + [settled])

    def cancel(self, record: FuelRecord, reason: str = "") -> CancelledRecord:
        """Freeze a record; cancelling twice is rejected"""
        self._reject_cancelled(record, "cancel")
        logger.info(
            "Fuel record cancelled",
            truck_no=record.truck_no,
            going_do=record.going_do,
            cancelled_from=record.status.value,
            reason=reason,
        )
        return CancelledRecord(
            **common_fields(record),
            total_lts=record.total_lts,
            extra=record.extra,
            balance=record.balance,
            return_do=record.return_do,
            cancelled_from=record.status,
            cancellation_reason=reason,
        )

    @staticmethod
    def _activate(record: QueuedFuelRecord) -> FuelRecord:
        base = common_fields(record)
        reason = record.pending_config_reason
        if reason is not None:
            return LockedFuelRecord(
                **base,
                total_lts=record.total_lts,
                extra=record.extra,
                pending_config_reason=reason,
            )
        return ActiveGoingRecord(
            **base,
            total_lts=record.total_lts,
            extra=record.extra,
            balance=record.balance,
        )

    @staticmethod
    def _reject_cancelled(record: FuelRecord, action: str) -> None:
        if isinstance(record, CancelledRecord):
            raise RecordCancelledError(
                f"Cannot {action} a cancelled fuel record",
                truck_no=record.truck_no,
                status=record.status.value,
            )


__all__ = [
    "FuelRecordLifecycle",
    "QueueAdvance",
    "ReturnFuelAdjustment",
    "determine_journey_start",
    "extract_month",
]
