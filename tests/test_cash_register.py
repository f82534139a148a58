import threading
from decimal import Decimal

import pytest

from caja.core.exceptions import (
    AlreadyOpenError, InvalidAmountError, NotFoundError, SessionNotOpenError, ValidationError
)
from caja.modules.cash_register import CashRegisterRepository, CashRegisterService, MovementType
from caja.modules.sales import SaleCommitService
from caja.shared.database.models import CashMovement, RegisterSession, SESSION_CLOSED, SESSION_OPEN

from .conftest import OPERATOR_ID


class TestOpenSession:

    def test_open_with_float(self, db, seed):
        session = CashRegisterService(db).open_session(seed.register, Decimal("50000"), operator_id=OPERATOR_ID)

        assert session.status == SESSION_OPEN
        assert session.opening_float == Decimal("50000")
        assert session.initialized is True
        assert session.operator_id == OPERATOR_ID

    def test_open_without_float_is_not_initialized(self, db, seed):
        session = CashRegisterService(db).open_session(seed.register, operator_id=OPERATOR_ID)

        assert session.initialized is False
        assert session.opening_float == 0

    def test_second_open_fails(self, db, seed, open_session):
        with pytest.raises(AlreadyOpenError):
            CashRegisterService(db).open_session(seed.register, Decimal("1000"), operator_id=OPERATOR_ID)

        assert db.query(RegisterSession).count() == 1

    def test_other_register_can_open(self, db, seed, open_session):
        session = CashRegisterService(db).open_session(seed.other_register, 0, operator_id=OPERATOR_ID)
        assert session.register_id == seed.other_register

    def test_negative_float(self, db, seed):
        with pytest.raises(InvalidAmountError):
            CashRegisterService(db).open_session(seed.register, Decimal("-1"), operator_id=OPERATOR_ID)
        assert db.query(RegisterSession).count() == 0

    def test_unknown_or_inactive_register(self, db, seed):
        service = CashRegisterService(db)
        with pytest.raises(NotFoundError):
            service.open_session(9999, 0, operator_id=OPERATOR_ID)
        with pytest.raises(NotFoundError):
            service.open_session(seed.inactive_register, 0, operator_id=OPERATOR_ID)

    def test_operator_is_required(self, db, seed):
        with pytest.raises(ValidationError):
            CashRegisterService(db).open_session(seed.register, 0)

    def test_reopen_after_close_creates_new_session(self, db, seed, open_session):
        service = CashRegisterService(db)
        service.close_session(open_session.id, Decimal("50000"))

        reopened = service.open_session(seed.register, Decimal("20000"), operator_id=OPERATOR_ID)

        assert reopened.id != open_session.id
        assert service.get_open_session(seed.register).id == reopened.id


class TestOpeningFloat:

    def test_assign_float(self, db, seed):
        service = CashRegisterService(db)
        session = service.open_session(seed.register, operator_id=OPERATOR_ID)

        updated = service.assign_opening_float(session.id, Decimal("30000"))

        assert updated.initialized is True
        assert updated.opening_float == Decimal("30000")

    def test_assign_twice_fails(self, db, seed, open_session):
        with pytest.raises(ValidationError):
            CashRegisterService(db).assign_opening_float(open_session.id, Decimal("1000"))

    def test_assign_negative_fails(self, db, seed):
        service = CashRegisterService(db)
        session = service.open_session(seed.register, operator_id=OPERATOR_ID)
        with pytest.raises(InvalidAmountError):
            service.assign_opening_float(session.id, -5)


class TestMovements:

    def test_record_ingreso_and_retiro(self, db, open_session):
        service = CashRegisterService(db)
        service.record_movement(open_session.id, MovementType.ingreso, Decimal("5000"), "cambio", OPERATOR_ID)
        service.record_movement(open_session.id, "retiro", Decimal("2000"), None, OPERATOR_ID)

        movements = service.list_movements(open_session.id)

        assert [m.movement_type for m in movements] == ["retiro", "ingreso"]
        assert service.ledger.net(open_session.id) == Decimal("3000")

    @pytest.mark.parametrize("amount", [0, -100, "abc"])
    def test_invalid_amount(self, db, open_session, amount):
        with pytest.raises(InvalidAmountError):
            CashRegisterService(db).record_movement(open_session.id, MovementType.ingreso, amount)
        assert db.query(CashMovement).count() == 0

    def test_closed_session_rejects_movements(self, db, open_session):
        service = CashRegisterService(db)
        service.close_session(open_session.id, Decimal("50000"))

        with pytest.raises(SessionNotOpenError):
            service.record_movement(open_session.id, MovementType.ingreso, Decimal("100"))

    def test_unknown_session(self, db, seed):
        with pytest.raises(NotFoundError):
            CashRegisterService(db).record_movement(9999, MovementType.ingreso, Decimal("100"))


class TestAuditAndClose:

    def test_audit_does_not_modify_session(self, db, open_session):
        service = CashRegisterService(db)
        service.record_movement(open_session.id, MovementType.retiro, Decimal("10000"))

        audit = service.audit(open_session.id, Decimal("39000"))

        assert audit["theoretical_float"] == Decimal("40000")
        assert audit["variance"] == Decimal("-1000")
        assert service.get_session(open_session.id).status == SESSION_OPEN

    def test_close_reconciles_cash(self, db, seed, open_session, make_cart):
        service = CashRegisterService(db)
        service.record_movement(open_session.id, MovementType.ingreso, Decimal("5000"))
        sales = SaleCommitService(db)
        sales.commit(make_cart((seed.coffee, 2)), open_session.id, "efectivo",
                     amount_received=Decimal("2000"))
        # la venta con tarjeta no entra al efectivo teórico
        sales.commit(make_cart((seed.cake, 1)), open_session.id, "tarjeta")

        closed = service.close_session(open_session.id, Decimal("57000"), "sin novedad", OPERATOR_ID)

        assert closed.status == SESSION_CLOSED
        assert closed.theoretical_float == Decimal("57000")
        assert closed.variance == 0
        assert closed.closed_by == OPERATOR_ID
        assert closed.closing_notes == "sin novedad"

    def test_close_records_shortfall(self, db, open_session):
        closed = CashRegisterService(db).close_session(open_session.id, Decimal("49500"))
        assert closed.variance == Decimal("-500")

    def test_double_close_fails(self, db, open_session):
        service = CashRegisterService(db)
        service.close_session(open_session.id, Decimal("50000"))

        with pytest.raises(SessionNotOpenError):
            service.close_session(open_session.id, Decimal("1"))

        assert service.get_session(open_session.id).declared_float == Decimal("50000")

    @pytest.mark.parametrize("declared", [-1, "mucho", None])
    def test_invalid_declared_float(self, db, open_session, declared):
        service = CashRegisterService(db)
        with pytest.raises(InvalidAmountError):
            service.close_session(open_session.id, declared)
        assert service.get_session(open_session.id).status == SESSION_OPEN

    def test_summary(self, db, seed, open_session, make_cart):
        service = CashRegisterService(db)
        service.record_movement(open_session.id, MovementType.ingreso, Decimal("1000"))
        SaleCommitService(db).commit(make_cart((seed.juice, 1)), open_session.id, "efectivo")

        summary = service.summary(open_session.id)

        assert summary["sales_count"] == 1
        assert summary["cash_sales"] == Decimal("1000")
        assert summary["theoretical_float"] == Decimal("52000")
        assert summary["sales_by_payment_method"] == {"efectivo": Decimal("1000")}
        assert len(summary["movements"]) == 1


class TestConcurrentOpen:

    def test_only_one_of_two_concurrent_opens_succeeds(self, db, seed, session_factory):
        db.close()
        barrier = threading.Barrier(2)
        results = []

        def open_register():
            thread_db = session_factory()
            try:
                barrier.wait()
                CashRegisterService(thread_db).open_session(seed.register, Decimal("1000"), operator_id=OPERATOR_ID)
                results.append("ok")
            except AlreadyOpenError:
                results.append("already_open")
            finally:
                thread_db.close()

        threads = [threading.Thread(target=open_register) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert sorted(results) == ["already_open", "ok"]

        check = session_factory()
        try:
            open_rows = check.query(RegisterSession).filter(
                RegisterSession.register_id == seed.register,
                RegisterSession.status == SESSION_OPEN
            ).count()
            assert open_rows == 1
        finally:
            check.close()

    def test_unique_index_rejects_open_that_missed_the_check(self, db, seed, open_session, monkeypatch):
        # la consulta previa no ve la sesión abierta; el índice único la rechaza
        monkeypatch.setattr(CashRegisterRepository, "get_open_session", lambda self, register_id: None)

        with pytest.raises(AlreadyOpenError):
            CashRegisterService(db).open_session(seed.register, Decimal("1000"), operator_id=OPERATOR_ID)

        assert db.query(RegisterSession).count() == 1
