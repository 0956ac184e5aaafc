from .approvals import ApprovalEngine, EngineContext

__all__ = ["ApprovalEngine", "EngineContext"]
