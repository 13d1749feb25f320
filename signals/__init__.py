"""
QRoyal signals - public event API.

Emitted signals:
- customer_created: Emitted by services.customer.signup() / create_provisional()
- business_created: Emitted by services.business.signup()
- membership_created: Emitted when a scan or a join creates a membership
- points_awarded: Emitted by AwardService.award() on every successful scan
- reward_won: Emitted by AwardService.award() when the threshold is reached
"""

from django.dispatch import Signal

customer_created = Signal()  # sender=Customer, customer=Customer
business_created = Signal()  # sender=Business, business=Business
membership_created = Signal()  # sender=Membership, membership=Membership
points_awarded = Signal()  # sender=Membership, membership=Membership, result=ScanResult
reward_won = Signal()  # sender=Membership, membership=Membership, result=ScanResult
