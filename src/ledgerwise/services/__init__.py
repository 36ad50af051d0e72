"""Application services and the container that wires them to repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from ..config import BaseConfig
from ..infra.database import SessionFactory
from ..infra.repositories import (
    SQLModelAssetRepository,
    SQLModelLiabilityRepository,
    SQLModelTransactionRepository,
    SQLModelUserRepository,
)
from .advice import AdviceGenerator
from .analytics import AnalyticsService
from .assets import AssetService
from .auth import AuthService
from .ledger_service import LedgerService
from .liabilities import LiabilityService
from .net_worth import NetWorthService


@dataclass
class Services:
    auth: AuthService
    ledger: LedgerService
    assets: AssetService
    liabilities: LiabilityService
    net_worth: NetWorthService
    analytics: AnalyticsService
    advice: AdviceGenerator


def build_services(
    config: BaseConfig,
    session_factory: SessionFactory,
    *,
    http_session: Optional[requests.Session] = None,
) -> Services:
    """Wire every service to SQLModel repositories sharing one session factory."""

    transactions = SQLModelTransactionRepository(session_factory)
    assets = SQLModelAssetRepository(session_factory)
    liabilities = SQLModelLiabilityRepository(session_factory)
    users = SQLModelUserRepository(session_factory)

    net_worth = NetWorthService(transactions=transactions, assets=assets, liabilities=liabilities)
    analytics = AnalyticsService(transactions=transactions)
    return Services(
        auth=AuthService(
            users=users,
            secret_key=config.SECRET_KEY,
            salt=config.TOKEN_SALT,
            max_age=config.TOKEN_MAX_AGE,
        ),
        ledger=LedgerService(
            transactions=transactions,
            assets=assets,
            liabilities=liabilities,
            net_worth=net_worth,
        ),
        assets=AssetService(assets=assets, transactions=transactions),
        liabilities=LiabilityService(liabilities=liabilities, transactions=transactions),
        net_worth=net_worth,
        analytics=analytics,
        advice=AdviceGenerator(
            config.ai_config(),
            transactions=transactions,
            net_worth=net_worth,
            analytics=analytics,
            session=http_session,
        ),
    )


__all__ = [
    "AdviceGenerator",
    "AnalyticsService",
    "AssetService",
    "AuthService",
    "LedgerService",
    "LiabilityService",
    "NetWorthService",
    "Services",
    "build_services",
]
