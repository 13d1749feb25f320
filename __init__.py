"""
Django QRoyal - QR-code loyalty program.

Usage:
    from qroyal import LoyaltyService
    from qroyal.gates import Gates, GateError, GateResult

    resolved = LoyaltyService.resolve("https://shop.example/customer?token=cust_x1y2z3")
    result = LoyaltyService.scan("cust_x1y2z3", business)
    if result.reward_won:
        show(result.reward_message)

    # Gates validation
    Gates.loyalty_rules(points_per_scan=1, reward_threshold=10)
    Gates.scan_replay_protection("cust_x1y2z3", business.pk)
"""


def __getattr__(name):
    if name == "LoyaltyService":
        from qroyal.service import LoyaltyService

        return LoyaltyService
    if name == "Gates":
        from qroyal.gates import Gates

        return Gates
    if name == "GateError":
        from qroyal.gates import GateError

        return GateError
    if name == "GateResult":
        from qroyal.gates import GateResult

        return GateResult
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LoyaltyService", "Gates", "GateError", "GateResult"]
__version__ = "0.1.0"
