"""Scan protocols."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from qroyal.models import Customer


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of one award attempt, reported back to the scanning terminal.

    Never persisted. On failure only success, message and error_code are
    meaningful.
    """

    success: bool
    message: str
    error_code: str | None = None
    customer: "Customer | None" = None
    points_awarded: int = 0
    new_total: int | None = None
    new_member: bool = False
    reward_won: bool = False
    reward_message: str = ""
    rewards_earned: int = 0

    @classmethod
    def failure(cls, error_code: str, message: str) -> "ScanResult":
        return cls(success=False, message=message, error_code=error_code)

    def as_dict(self) -> dict:
        data = {
            "success": self.success,
            "message": self.message,
        }
        if not self.success:
            data["error_code"] = self.error_code
            return data
        data.update(
            {
                "customer": {
                    "token": self.customer.token,
                    "name": self.customer.name,
                    "needs_setup": self.customer.needs_setup,
                }
                if self.customer
                else None,
                "points_awarded": self.points_awarded,
                "new_total": self.new_total,
                "new_member": self.new_member,
                "reward_won": self.reward_won,
                "reward_message": self.reward_message,
                "rewards_earned": self.rewards_earned,
            }
        )
        return data
