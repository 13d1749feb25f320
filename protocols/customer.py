"""Customer protocols."""

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class MembershipSnapshot:
    """Point balance at one business, as seen by a customer display."""

    business_id: int
    business_name: str
    points: int
    reward_threshold: int
    # None when the source cannot report an explicit reward counter
    rewards_earned: int | None = None


@dataclass(frozen=True)
class DiscountInfo:
    """Discount as shown to customers."""

    id: int
    name: str
    description: str
    image_url: str
    expiry_date: str | None
    percentage: int | None
    price: str | None
    price_cutoff: str | None
    business_id: int | None


@dataclass(frozen=True)
class CustomerSnapshot:
    """Current customer state returned to polling displays."""

    token: str
    name: str
    phone: str | None
    needs_setup: bool
    memberships: list[MembershipSnapshot] = field(default_factory=list)

    @property
    def total_points(self) -> int:
        return sum(m.points for m in self.memberships)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["total_points"] = self.total_points
        return data
