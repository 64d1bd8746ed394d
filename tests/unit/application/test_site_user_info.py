"""Tests for SiteUserInfoUseCase."""

from __future__ import annotations

import pytest

from trackarr.application.use_cases import SiteAccount, SiteUserInfoUseCase
from trackarr.domain.entities import SiteUserInfo
from trackarr.domain.ports import SiteExtractionEvent
from trackarr.domain.sites import (
    ConfigNotFound,
    ConfigParseError,
    Credential,
    ShapeError,
    SiteConfiguration,
    TransportError,
)


class _Registry:
    def __init__(self, *site_ids: str, broken: tuple[str, ...] = ()) -> None:
        self._configs = {
            s: SiteConfiguration(id=s, name=s.upper(), domain=f"https://{s}.test/")
            for s in site_ids
        }
        self._broken = broken

    def load(self, site_id: str) -> SiteConfiguration:
        if site_id in self._broken:
            raise ConfigParseError(f"{site_id}.yml: bad document")
        if site_id not in self._configs:
            raise ConfigNotFound(site_id)
        return self._configs[site_id]

    def list(self) -> list[SiteConfiguration]:
        return list(self._configs.values())


class _ExplodingRegistry:
    def load(self, site_id: str) -> SiteConfiguration:
        raise OSError("disk gone")

    def list(self) -> list[SiteConfiguration]:
        return []


class _Client:
    def __init__(self, config: SiteConfiguration, outcome: object) -> None:
        self.config = config
        self._outcome = outcome

    @property
    def can_search(self) -> bool:
        return False

    async def search(self, keyword: str):
        return []

    async def get_user_info(self) -> SiteUserInfo | None:
        if isinstance(self._outcome, Exception):
            raise self._outcome
        return self._outcome


class _Factory:
    def __init__(self, outcomes: dict[str, object]) -> None:
        self._outcomes = outcomes

    def __call__(self, config: SiteConfiguration, credential: Credential) -> _Client:
        return _Client(config, self._outcomes[config.id])


class _Observer:
    def __init__(self) -> None:
        self.events: list[SiteExtractionEvent] = []

    def record(self, event: SiteExtractionEvent) -> None:
        self.events.append(event)


ALICE = SiteUserInfo(uid="42", username="alice", uploaded="1.50 TB")
CREDENTIAL = Credential(cookies="uid=42")


class TestGetUserInfo:
    async def test_returns_info(self) -> None:
        observer = _Observer()
        use_case = SiteUserInfoUseCase(
            _Registry("a"), _Factory({"a": ALICE}), observer=observer
        )

        assert await use_case.get_user_info("a", CREDENTIAL) == ALICE
        (event,) = observer.events
        assert (event.site, event.operation, event.outcome) == ("a", "userinfo", "ok")

    @pytest.mark.parametrize(
        "outcome",
        [None, ShapeError("no data"), TransportError("HTTP 401", status=401)],
    )
    async def test_unavailable_is_none(self, outcome: object) -> None:
        use_case = SiteUserInfoUseCase(_Registry("a"), _Factory({"a": outcome}))
        assert await use_case.get_user_info("a", CREDENTIAL) is None

    async def test_unknown_site_raises(self) -> None:
        use_case = SiteUserInfoUseCase(_Registry("a"), _Factory({}))
        with pytest.raises(ConfigNotFound):
            await use_case.get_user_info("missing", CREDENTIAL)

    async def test_broken_document_raises(self) -> None:
        use_case = SiteUserInfoUseCase(_Registry(broken=("b",)), _Factory({}))
        with pytest.raises(ConfigParseError):
            await use_case.get_user_info("b", CREDENTIAL)

    async def test_unexpected_client_error_is_none(self) -> None:
        observer = _Observer()
        use_case = SiteUserInfoUseCase(
            _Registry("a"),
            _Factory({"a": RuntimeError("boom")}),
            observer=observer,
        )

        assert await use_case.get_user_info("a", CREDENTIAL) is None
        (event,) = observer.events
        assert event.outcome == "failed"
        assert event.error == "unexpected error: RuntimeError: boom"


class TestConnection:
    async def test_success(self) -> None:
        use_case = SiteUserInfoUseCase(_Registry("a"), _Factory({"a": ALICE}))

        check = await use_case.test_connection("a", CREDENTIAL)

        assert check.success
        assert check.message == "Connected to A as alice"
        assert check.user_info == ALICE

    async def test_extraction_failure(self) -> None:
        use_case = SiteUserInfoUseCase(
            _Registry("a"), _Factory({"a": TransportError("HTTP 403", status=403)})
        )

        check = await use_case.test_connection("a", CREDENTIAL)

        assert not check.success
        assert check.message == "Connection to A failed: HTTP 403"
        assert check.user_info is None

    async def test_unexpected_client_error(self) -> None:
        use_case = SiteUserInfoUseCase(
            _Registry("a"), _Factory({"a": RuntimeError("boom")})
        )

        check = await use_case.test_connection("a", CREDENTIAL)

        assert not check.success
        assert check.message == (
            "Connection to A failed: unexpected error: RuntimeError: boom"
        )

    async def test_no_matching_rule_set(self) -> None:
        use_case = SiteUserInfoUseCase(_Registry("a"), _Factory({"a": None}))

        check = await use_case.test_connection("a", CREDENTIAL)

        assert not check.success
        assert check.message.startswith("Connection to A failed:")

    async def test_unknown_site(self) -> None:
        use_case = SiteUserInfoUseCase(_Registry(), _Factory({}))

        check = await use_case.test_connection("missing", CREDENTIAL)

        assert not check.success
        assert "not found" in check.message


class TestGetAllUserInfo:
    async def test_maps_every_account(self) -> None:
        use_case = SiteUserInfoUseCase(
            _Registry("a", "b", broken=("c",)),
            _Factory({"a": ALICE, "b": ShapeError("missing data")}),
            max_concurrent=1,
        )
        accounts = [
            SiteAccount(site_id=s, credential=CREDENTIAL) for s in ("a", "b", "c", "d")
        ]

        infos = await use_case.get_all_user_info(accounts)

        assert infos == {"a": ALICE, "b": None, "c": None, "d": None}

    async def test_unexpected_error_does_not_hide_other_sites(self) -> None:
        observer = _Observer()
        use_case = SiteUserInfoUseCase(
            _Registry("a", "b"),
            _Factory({"a": RuntimeError("boom"), "b": ALICE}),
            observer=observer,
        )
        accounts = [SiteAccount(site_id=s, credential=CREDENTIAL) for s in ("a", "b")]

        infos = await use_case.get_all_user_info(accounts)

        assert infos == {"a": None, "b": ALICE}
        outcomes = {e.site: e.outcome for e in observer.events}
        assert outcomes == {"a": "failed", "b": "ok"}

    async def test_unexpected_registry_error(self) -> None:
        use_case = SiteUserInfoUseCase(_ExplodingRegistry(), _Factory({}))
        accounts = [SiteAccount(site_id="a", credential=CREDENTIAL)]

        assert await use_case.get_all_user_info(accounts) == {"a": None}

    async def test_empty(self) -> None:
        use_case = SiteUserInfoUseCase(_Registry(), _Factory({}))
        assert await use_case.get_all_user_info([]) == {}
