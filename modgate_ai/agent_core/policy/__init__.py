from .global_policy import GlobalPolicy
from .models import ApprovalPolicy, PolicyConfig, PolicyDecision

__all__ = ["ApprovalPolicy", "GlobalPolicy", "PolicyConfig", "PolicyDecision"]
