"""
Transfer lifecycle engine tests.

Verifies:
- pending -> in_transit -> received, with attribution and timestamps
- Out-of-order transitions are rejected and change nothing
- Zero/negative shortage and damage rows are dropped on receive
- TransferReceived is published after commit; handler failures stay contained
- Concurrent dispatches: exactly one wins
"""

import threading

import pytest

from stock_control.errors import InvalidTransitionError, NotFoundError, ValidationError
from stock_control.services.events import EventBus, TransferReceived
from stock_control.services.transfer_service import (
    TRANSFER_STATUS_IN_TRANSIT,
    TRANSFER_STATUS_PENDING,
    TRANSFER_STATUS_RECEIVED,
    TransferService,
)
from stock_control.store import build_memory_store


WIDGET_ITEM = {
    "productId": "p1",
    "productCode": "C1",
    "productName": "Widget",
    "quantity": 5,
    "unit": "pieces",
}


def _payload(**overrides):
    data = {
        "fromLocationId": "loc-a",
        "toLocationId": "loc-b",
        "driverName": "Sam Driver",
        "vehicleReg": "AB12 CDE",
        "items": [dict(WIDGET_ITEM)],
    }
    data.update(overrides)
    return data


@pytest.fixture
def recorded():
    return []


@pytest.fixture
def engine(store, recorded):
    bus = EventBus(async_mode=False)
    bus.subscribe(TransferReceived, recorded.append)
    return TransferService(store, bus)


# =============================================================================
# HAPPY PATH
# =============================================================================


class TestLifecycle:

    def test_full_lifecycle_filters_zero_shortage(self, engine, recorded):
        transfer = engine.create_transfer(_payload(), user_id="creator")
        assert transfer["status"] == TRANSFER_STATUS_PENDING
        assert transfer["createdBy"] == "creator"

        dispatched = engine.dispatch_transfer(transfer["id"], user_id="dispatcher")
        assert dispatched["status"] == TRANSFER_STATUS_IN_TRANSIT
        assert dispatched["dispatchedBy"] == "dispatcher"
        assert dispatched["dispatchedAt"] is not None
        assert dispatched["receivedAt"] is None

        received = engine.receive_transfer(
            transfer["id"],
            user_id="receiver",
            shortages=[{"productId": "p1", "productCode": "C1", "productName": "Widget", "quantityShort": 0}],
            damages=[{"productId": "p1", "productCode": "C1", "productName": "Widget",
                      "quantityDamaged": 2, "reason": "drop"}],
        )

        assert received["status"] == TRANSFER_STATUS_RECEIVED
        assert received["receivedBy"] == "receiver"
        assert received["receivedAt"] is not None
        assert received["dispatchedAt"] == dispatched["dispatchedAt"]
        assert received["shortages"] == []
        assert received["damages"] == [{
            "productId": "p1",
            "productCode": "C1",
            "productName": "Widget",
            "quantityDamaged": 2,
            "reason": "drop",
        }]

        assert len(recorded) == 1
        assert recorded[0].transfer["id"] == transfer["id"]
        assert recorded[0].transfer["status"] == TRANSFER_STATUS_RECEIVED

    def test_items_are_not_changed_by_receive(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        received = engine.receive_transfer(
            transfer["id"], user_id="u",
            shortages=[{"productId": "p1", "quantityShort": 1}],
        )
        assert received["items"] == transfer["items"]
        assert received["shortages"][0]["quantityShort"] == 1

    def test_negative_rows_are_dropped(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        received = engine.receive_transfer(
            transfer["id"], user_id="u",
            shortages=[{"productId": "p1", "quantityShort": -3}],
            damages=[{"productId": "p1", "quantityDamaged": 0, "reason": ""}],
        )
        assert received["shortages"] == []
        assert received["damages"] == []

    def test_missing_codes_are_filled_from_line(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        received = engine.receive_transfer(
            transfer["id"], user_id="u",
            shortages=[{"productId": "p1", "quantityShort": 2}],
        )
        assert received["shortages"] == [{
            "productId": "p1", "productCode": "C1", "productName": "Widget", "quantityShort": 2,
        }]

    def test_event_carries_location_names(self, store, engine, recorded):
        origin = store.locations.create({"name": "Central Warehouse"})
        transfer = engine.create_transfer(
            _payload(fromLocationId=origin["id"], toLocationId="gone-location"), user_id="u",
        )
        engine.dispatch_transfer(transfer["id"], user_id="u")
        engine.receive_transfer(transfer["id"], user_id="u")

        event = recorded[0]
        assert event.from_location_name == "Central Warehouse"
        assert event.to_location_name == "gone-location"
        assert event.recipient_email is None

    def test_list_filters_by_status(self, engine):
        first = engine.create_transfer(_payload(), user_id="u")
        second = engine.create_transfer(_payload(driverName="Other"), user_id="u")
        engine.dispatch_transfer(second["id"], user_id="u")

        assert [t["id"] for t in engine.list_transfers()] == [first["id"], second["id"]]
        assert [t["id"] for t in engine.list_transfers("pending")] == [first["id"]]
        assert [t["id"] for t in engine.list_transfers("in_transit")] == [second["id"]]
        with pytest.raises(ValidationError):
            engine.list_transfers("cancelled")


# =============================================================================
# CREATION RULES
# =============================================================================


class TestCreateValidation:

    def test_empty_items_rejected_and_nothing_persisted(self, store, engine):
        with pytest.raises(ValidationError):
            engine.create_transfer(_payload(items=[]), user_id="u")
        assert store.transfers.get_all() == []

    @pytest.mark.parametrize("quantity", [0, -1, 2.5, True, "3", None])
    def test_bad_quantity_rejected(self, store, engine, quantity):
        item = dict(WIDGET_ITEM, quantity=quantity)
        with pytest.raises(ValidationError):
            engine.create_transfer(_payload(items=[item]), user_id="u")
        assert store.transfers.get_all() == []

    @pytest.mark.parametrize("field", ["fromLocationId", "toLocationId", "driverName", "vehicleReg"])
    def test_required_text_fields(self, engine, field):
        with pytest.raises(ValidationError):
            engine.create_transfer(_payload(**{field: "  "}), user_id="u")

    @pytest.mark.parametrize("field,limit", [
        ("fromLocationId", 36), ("toLocationId", 36), ("driverName", 255), ("vehicleReg", 64),
    ])
    def test_text_fields_bounded_by_column_length(self, store, engine, field, limit):
        with pytest.raises(ValidationError, match=f"{field} exceeds max length {limit}"):
            engine.create_transfer(_payload(**{field: "x" * (limit + 1)}), user_id="u")
        assert store.transfers.get_all() == []

    def test_same_location_rejected(self, engine):
        with pytest.raises(ValidationError):
            engine.create_transfer(_payload(toLocationId="loc-a"), user_id="u")

    def test_unknown_product_needs_snapshot_fields(self, engine):
        item = {"productId": "ghost", "quantity": 1}
        with pytest.raises(ValidationError):
            engine.create_transfer(_payload(items=[item]), user_id="u")

    def test_known_product_is_snapshotted(self, store, engine):
        product = store.products.create({
            "code": "BOLT-10", "name": "Bolt", "category": "Hardware", "unit": "boxes",
        })
        transfer = engine.create_transfer(
            _payload(items=[{"productId": product["id"], "productName": "ignored", "quantity": 3}]),
            user_id="u",
        )
        assert transfer["items"] == [{
            "productId": product["id"],
            "productCode": "BOLT-10",
            "productName": "Bolt",
            "quantity": 3,
            "unit": "boxes",
        }]

        store.products.update(product["id"], {"name": "Renamed Bolt"})
        assert engine.get_transfer(transfer["id"])["items"][0]["productName"] == "Bolt"


# =============================================================================
# TRANSITION RULES
# =============================================================================


class TestTransitionRules:

    def test_double_dispatch_rejected(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        first = engine.dispatch_transfer(transfer["id"], user_id="first")

        with pytest.raises(InvalidTransitionError) as excinfo:
            engine.dispatch_transfer(transfer["id"], user_id="second")

        assert "in transit" in str(excinfo.value)
        current = engine.get_transfer(transfer["id"])
        assert current["dispatchedBy"] == "first"
        assert current["dispatchedAt"] == first["dispatchedAt"]

    def test_receive_requires_in_transit(self, engine, recorded):
        transfer = engine.create_transfer(_payload(), user_id="u")
        with pytest.raises(InvalidTransitionError):
            engine.receive_transfer(transfer["id"], user_id="u")
        assert engine.get_transfer(transfer["id"])["status"] == TRANSFER_STATUS_PENDING
        assert recorded == []

    def test_receive_twice_rejected(self, engine, recorded):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        engine.receive_transfer(transfer["id"], user_id="u")
        with pytest.raises(InvalidTransitionError):
            engine.receive_transfer(transfer["id"], user_id="u",
                                    shortages=[{"productId": "p1", "quantityShort": 1}])
        assert engine.get_transfer(transfer["id"])["shortages"] == []
        assert len(recorded) == 1

    def test_dispatch_after_receive_rejected(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        engine.receive_transfer(transfer["id"], user_id="u")
        with pytest.raises(InvalidTransitionError):
            engine.dispatch_transfer(transfer["id"], user_id="u")

    def test_unknown_transfer(self, engine):
        with pytest.raises(NotFoundError):
            engine.dispatch_transfer("TRF-1-ABCD", user_id="u")
        with pytest.raises(NotFoundError):
            engine.receive_transfer("TRF-1-ABCD", user_id="u")
        with pytest.raises(NotFoundError):
            engine.get_transfer("TRF-1-ABCD")

    def test_shortage_for_product_not_on_transfer(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        with pytest.raises(ValidationError):
            engine.receive_transfer(transfer["id"], user_id="u",
                                    shortages=[{"productId": "p2", "quantityShort": 1}])
        assert engine.get_transfer(transfer["id"])["status"] == TRANSFER_STATUS_IN_TRANSIT

    def test_damage_exceeding_line_quantity(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        with pytest.raises(ValidationError):
            engine.receive_transfer(transfer["id"], user_id="u",
                                    damages=[{"productId": "p1", "quantityDamaged": 6, "reason": "x"}])

    def test_split_rows_cannot_exceed_line_quantity(self, engine, recorded):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        with pytest.raises(ValidationError):
            engine.receive_transfer(
                transfer["id"], user_id="u",
                shortages=[{"productId": "p1", "quantityShort": 5},
                           {"productId": "p1", "quantityShort": 5}],
                damages=[{"productId": "p1", "quantityDamaged": 5, "reason": "crushed"}],
            )
        assert engine.get_transfer(transfer["id"])["status"] == TRANSFER_STATUS_IN_TRANSIT
        assert recorded == []

    def test_shortage_plus_damage_counted_together(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        with pytest.raises(ValidationError):
            engine.receive_transfer(
                transfer["id"], user_id="u",
                shortages=[{"productId": "p1", "quantityShort": 3}],
                damages=[{"productId": "p1", "quantityDamaged": 3, "reason": "wet"}],
            )

        received = engine.receive_transfer(
            transfer["id"], user_id="u",
            shortages=[{"productId": "p1", "quantityShort": 2}],
            damages=[{"productId": "p1", "quantityDamaged": 3, "reason": "wet"}],
        )
        assert received["status"] == TRANSFER_STATUS_RECEIVED

    def test_fractional_shortage_rejected(self, engine):
        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        with pytest.raises(ValidationError):
            engine.receive_transfer(transfer["id"], user_id="u",
                                    shortages=[{"productId": "p1", "quantityShort": 1.5}])


# =============================================================================
# NOTIFICATION ISOLATION
# =============================================================================


class TestNotificationFailure:

    def test_failing_handler_does_not_undo_receive(self, store):
        def explode(event):
            raise RuntimeError("smtp down")

        bus = EventBus(async_mode=False)
        bus.subscribe(TransferReceived, explode)
        engine = TransferService(store, bus)

        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        received = engine.receive_transfer(transfer["id"], user_id="u")

        assert received["status"] == TRANSFER_STATUS_RECEIVED
        assert engine.get_transfer(transfer["id"])["status"] == TRANSFER_STATUS_RECEIVED

    def test_async_bus_delivers_off_thread(self, store):
        seen = []
        bus = EventBus(async_mode=True, max_workers=1)
        bus.subscribe(TransferReceived, lambda e: seen.append(threading.current_thread().name))
        engine = TransferService(store, bus)

        transfer = engine.create_transfer(_payload(), user_id="u")
        engine.dispatch_transfer(transfer["id"], user_id="u")
        engine.receive_transfer(transfer["id"], user_id="u")
        bus.shutdown(wait=True)

        assert len(seen) == 1
        assert seen[0].startswith("events")


# =============================================================================
# CONCURRENCY
# =============================================================================


class TestConcurrentDispatch:

    def test_exactly_one_dispatch_wins(self):
        engine = TransferService(build_memory_store(), EventBus(async_mode=False))
        transfer = engine.create_transfer(_payload(), user_id="u")

        workers = 8
        barrier = threading.Barrier(workers)
        results = []
        lock = threading.Lock()

        def attempt(n):
            barrier.wait()
            try:
                engine.dispatch_transfer(transfer["id"], user_id=f"user-{n}")
                outcome = ("ok", n)
            except InvalidTransitionError:
                outcome = ("rejected", n)
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=attempt, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        winners = [n for status, n in results if status == "ok"]
        assert len(winners) == 1
        assert len(results) == workers
        assert engine.get_transfer(transfer["id"])["dispatchedBy"] == f"user-{winners[0]}"
