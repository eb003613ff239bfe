from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session, sessionmaker

from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.models.database import Applicant, ContractorRequest, ContractorRequestStatus
from src.services.contractor import ContractorRequestService


def _add_applicant(
    db: Session, email: str = "a@x.com", phone: str = "555-0100", **fields: object
) -> Applicant:
    applicant = Applicant(
        email=email, phone=phone, reddit_username="testuser", reddit_verified=True, **fields
    )
    db.add(applicant)
    db.commit()
    return applicant


@pytest.fixture
def service(db_session: Session) -> ContractorRequestService:
    return ContractorRequestService(db_session)


@pytest.mark.asyncio
async def test_creates_pending_request(
    service: ContractorRequestService,
    db_session: Session,
    session_factory: sessionmaker,
) -> None:
    applicant = _add_applicant(db_session)

    result = await service.submit("a@x.com", "acme", "Acme Co")

    assert result.success is True
    assert result.status == "pending"
    assert "pinged them" in result.message

    with session_factory() as s:
        row = s.query(ContractorRequest).one()
        assert row.id == result.request_id
        assert row.applicant_id == applicant.id
        assert row.email == "a@x.com"
        assert row.company_slug == "acme"
        assert row.company_name == "Acme Co"
        assert row.status == ContractorRequestStatus.PENDING.value
        assert row.joined_slack is True
        assert row.can_start_job is False


@pytest.mark.asyncio
async def test_unknown_email_is_not_found(
    service: ContractorRequestService, count_rows: Callable[[type], int]
) -> None:
    with pytest.raises(NotFoundError, match="complete the qualification form first"):
        await service.submit("nobody@x.com", "acme", "Acme Co")

    assert count_rows(ContractorRequest) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("slug", "name"),
    [(None, "Acme Co"), ("", "Acme Co"), ("acme", None), ("acme", "   ")],
)
async def test_missing_company_fields_write_nothing(
    service: ContractorRequestService,
    db_session: Session,
    count_rows: Callable[[type], int],
    slug: str | None,
    name: str | None,
) -> None:
    _add_applicant(db_session)

    with pytest.raises(ValidationError):
        await service.submit("a@x.com", slug, name)

    assert count_rows(ContractorRequest) == 0


@pytest.mark.asyncio
async def test_missing_email_is_validation_error(service: ContractorRequestService) -> None:
    with pytest.raises(ValidationError):
        await service.submit(None, "acme", "Acme Co")


@pytest.mark.asyncio
async def test_same_company_twice_is_duplicate(
    service: ContractorRequestService,
    db_session: Session,
    count_rows: Callable[[type], int],
) -> None:
    _add_applicant(db_session)
    await service.submit("a@x.com", "acme", "Acme Co")

    with pytest.raises(DuplicateError, match="already requested"):
        await service.submit("A@x.com", "acme", "Acme Co")

    assert count_rows(ContractorRequest) == 1


@pytest.mark.asyncio
async def test_distinct_companies_are_allowed(
    service: ContractorRequestService,
    db_session: Session,
    count_rows: Callable[[type], int],
) -> None:
    _add_applicant(db_session)
    await service.submit("a@x.com", "company-1", "Company 1")
    await service.submit("a@x.com", "company-2", "Company 2")

    assert count_rows(ContractorRequest) == 2


@pytest.mark.asyncio
async def test_shared_email_attaches_to_earliest_applicant(
    service: ContractorRequestService,
    db_session: Session,
    session_factory: sessionmaker,
) -> None:
    first = _add_applicant(
        db_session, phone="555-0100", created_at=datetime(2026, 1, 1, tzinfo=timezone.utc)
    )
    _add_applicant(
        db_session, phone="555-0199", created_at=datetime(2026, 2, 1, tzinfo=timezone.utc)
    )

    await service.submit("a@x.com", "acme", "Acme Co")

    with session_factory() as s:
        assert s.query(ContractorRequest).one().applicant_id == first.id


@pytest.mark.asyncio
async def test_race_past_precheck_maps_unique_violation_to_duplicate(
    db_session: Session,
    session_factory: sessionmaker,
    count_rows: Callable[[type], int],
) -> None:
    _add_applicant(db_session)
    first = ContractorRequestService(session_factory())
    second = ContractorRequestService(session_factory())
    # Both requests passed the existence check before either wrote
    second._find_request = lambda _applicant_id, _slug: None  # type: ignore[method-assign]

    await first.submit("a@x.com", "acme", "Acme Co")
    with pytest.raises(DuplicateError, match="already requested"):
        await second.submit("a@x.com", "acme", "Acme Co")

    first.db.close()
    second.db.close()
    assert count_rows(ContractorRequest) == 1


@pytest.mark.asyncio
async def test_concurrent_requests_resolve_to_one_row(
    db_session: Session,
    session_factory: sessionmaker,
    count_rows: Callable[[type], int],
) -> None:
    _add_applicant(db_session)
    services = [ContractorRequestService(session_factory()) for _ in range(2)]

    results = await asyncio.gather(
        *[svc.submit("a@x.com", "acme", "Acme Co") for svc in services],
        return_exceptions=True,
    )

    for svc in services:
        svc.db.close()
    assert sum(1 for r in results if not isinstance(r, BaseException)) == 1
    assert sum(1 for r in results if isinstance(r, DuplicateError)) == 1
    assert count_rows(ContractorRequest) == 1


@pytest.mark.asyncio
async def test_applicant_removed_mid_request_maps_to_not_found(
    db_session: Session,
    session_factory: sessionmaker,
    count_rows: Callable[[type], int],
) -> None:
    service = ContractorRequestService(session_factory())
    ghost = Applicant(id="00000000-0000-0000-0000-000000000000", email="a@x.com", phone="1")
    service._find_applicant = lambda _email: ghost  # type: ignore[method-assign]

    with pytest.raises(NotFoundError):
        await service.submit("a@x.com", "acme", "Acme Co")

    service.db.close()
    assert count_rows(ContractorRequest) == 0
