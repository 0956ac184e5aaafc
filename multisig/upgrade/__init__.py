from .gate import UpgradeGate
from .logic import UPGRADE_NAMESPACE, ApprovalLogic, LogicModule, proxiable_uuid

__all__ = ["UpgradeGate", "ApprovalLogic", "LogicModule", "UPGRADE_NAMESPACE", "proxiable_uuid"]
