"""
QRoyal JSON endpoints.

Business terminal:
    signup, login (password or scanned business code), logout, scan,
    settings, analytics, members, provisional customers

Customer device:
    signup, login, card (with ``join`` and ``discount_id`` links),
    polling state, setup, join, leave, profile (edit and delete)

Public:
    business search and profiles, discounts, QR images

Errors are JSON ``{"error_code": ..., "message": ...}`` with the message
localized for the active language.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import asdict

from django.core.exceptions import ValidationError
from django.http import HttpResponse, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View

from qroyal.conf import qroyal_settings
from qroyal.exceptions import QroyalError
from qroyal.gates import GateError
from qroyal.i18n import translate
from qroyal.models import Business
from qroyal.qr import QRStyle, render_identity_image
from qroyal.services import auth as auth_service
from qroyal.services import business as business_service
from qroyal.services import customer as customer_service
from qroyal.services import discount as discount_service
from qroyal.services.award import AwardService
from qroyal.sessions import BUSINESS, CUSTOMER, LoyaltySession, business_required, customer_required

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "CUSTOMER_NOT_FOUND": 404,
    "BUSINESS_NOT_FOUND": 404,
    "MEMBERSHIP_NOT_FOUND": 404,
    "DISCOUNT_NOT_FOUND": 404,
    "INVALID_CREDENTIALS": 401,
    "NOT_A_CUSTOMER_CODE": 400,
    "UNRECOGNIZED_CODE": 400,
    "DUPLICATE_SCAN": 409,
    "UNEXPECTED": 500,
}

GATE_STATUS = {
    "G1_LoyaltyRules": 400,
    "G2_ScanReplayProtection": 409,
    "G3_LoginRateLimit": 429,
}

GATE_MESSAGES = {
    "G1_LoyaltyRules": "invalid_input",
    "G2_ScanReplayProtection": "duplicate_scan",
    "G3_LoginRateLimit": "too_many_attempts",
}


def error_response(error_code: str, message: str, status: int | None = None, **extra) -> JsonResponse:
    return JsonResponse(
        {"error_code": error_code, "message": message, **extra},
        status=status or ERROR_STATUS.get(error_code, 400),
    )


def business_dict(business: Business) -> dict:
    return {
        "id": business.pk,
        "token": business.token,
        "name": business.name,
        "public_name": business.public_name,
        "display_name": business.display_name,
        "email": business.email,
        "points_per_scan": business.points_per_scan,
        "reward_threshold": business.reward_threshold,
        "reward_message": business.reward_message,
        "qr_logo_url": business.qr_logo_url,
        "qr_color": business.qr_color,
        "qr_eye_shape": business.qr_eye_shape,
        "qr_dot_style": business.qr_dot_style,
        "qr_data_url": business.qr_data_url,
    }


def public_business_dict(business: Business) -> dict:
    """What customers may see. No token or credentials."""
    return {
        "id": business.pk,
        "name": business.display_name,
        "points_per_scan": business.points_per_scan,
        "reward_threshold": business.reward_threshold,
        "reward_message": business.reward_message,
        "logo_url": business.qr_logo_url,
        "color": business.qr_color,
    }


class LoyaltyView(View):
    """
    Base view: parses JSON or form bodies and maps errors to JSON responses.

    QroyalError -> 400/401/404, GateError -> 400/409/429,
    model validation -> 400, anything else -> 500 (logged).
    """

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except QroyalError as exc:
            return error_response(exc.code, translate(exc.code.lower()))
        except GateError as exc:
            logger.warning("%s rejected: %s", exc.gate_name, exc.message)
            return error_response(
                exc.gate_name,
                translate(GATE_MESSAGES.get(exc.gate_name, "invalid_input")),
                status=GATE_STATUS.get(exc.gate_name, 409),
                details=exc.details,
            )
        except ValidationError as exc:
            errors = getattr(exc, "message_dict", None) or {"__all__": exc.messages}
            return error_response("INVALID_INPUT", translate("invalid_input"), status=400, errors=errors)
        except Exception:
            logger.exception("Unexpected error in %s", type(self).__name__)
            return error_response("UNEXPECTED", translate("error_unexpected"), status=500)

    def payload(self) -> dict:
        request = self.request
        if request.content_type == "application/json":
            try:
                data = json.loads(request.body or b"{}")
            except (json.JSONDecodeError, ValueError):
                raise QroyalError("INVALID_INPUT", reason="invalid JSON")
            if not isinstance(data, dict):
                raise QroyalError("INVALID_INPUT", reason="expected an object")
            return data
        return request.POST.dict()

    def current_business(self) -> Business:
        """Business of the open session (``business_required`` guarantees one)."""
        business = business_service.get(self.request.loyalty_session.subject_id)
        if business is None:
            raise QroyalError("BUSINESS_NOT_FOUND")
        return business


# =============================================================================
# Business terminal
# =============================================================================


class BusinessSignupView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        business = business_service.signup(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            public_name=data.get("public_name", ""),
        )
        LoyaltySession.open(request, BUSINESS, business)
        return JsonResponse({"business": business_dict(business)}, status=201)


class BusinessLoginView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        business = auth_service.authenticate_business(data.get("email", ""), data.get("password", ""))
        LoyaltySession.open(request, BUSINESS, business)
        return JsonResponse({"business": business_dict(business)})


class BusinessQRLoginView(LoyaltyView):
    """Log a terminal in by scanning the business code and entering the password."""

    def post(self, request):
        if not qroyal_settings.ALLOW_QR_LOGIN:
            return error_response("QR_LOGIN_DISABLED", translate("qr_login_disabled"), status=403)
        data = self.payload()
        business = auth_service.authenticate_business_code(data.get("code", ""), data.get("password", ""))
        LoyaltySession.open(request, BUSINESS, business)
        return JsonResponse({"business": business_dict(business)})


class LogoutView(LoyaltyView):
    def post(self, request):
        LoyaltySession.close(request)
        return JsonResponse({"message": translate("logged_out")})


@method_decorator(business_required, name="dispatch")
class ScanView(LoyaltyView):
    """
    POST {"code": "<scanned text>"} from a logged-in terminal.

    Returns the ScanResult. Failed scans keep the ScanResult shape with
    a status from ERROR_STATUS.
    """

    def post(self, request):
        business = self.current_business()
        result = AwardService.scan(
            self.payload().get("code", ""),
            business,
            created_by=f"terminal:{business.token}",
        )
        status = 200 if result.success else ERROR_STATUS.get(result.error_code, 400)
        return JsonResponse(result.as_dict(), status=status)


@method_decorator(business_required, name="dispatch")
class BusinessSettingsView(LoyaltyView):
    def get(self, request):
        return JsonResponse({"business": business_dict(self.current_business())})

    def post(self, request):
        data = self.payload()
        for key in ("points_per_scan", "reward_threshold"):
            if key in data:
                try:
                    data[key] = int(data[key])
                except (TypeError, ValueError):
                    raise QroyalError("INVALID_INPUT", fields=[key])
        business = business_service.update_settings(self.current_business(), **data)
        return JsonResponse({"business": business_dict(business), "message": translate("settings_saved")})


@method_decorator(business_required, name="dispatch")
class AnalyticsView(LoyaltyView):
    def get(self, request):
        try:
            days = max(1, min(int(request.GET.get("days", 7)), 365))
        except ValueError:
            raise QroyalError("INVALID_INPUT", fields=["days"])
        return JsonResponse(business_service.analytics(self.current_business(), days=days))


@method_decorator(business_required, name="dispatch")
class MembersView(LoyaltyView):
    def get(self, request):
        members = business_service.members(self.current_business(), query=request.GET.get("q"))
        return JsonResponse(
            {
                "members": [
                    {
                        "token": m.customer.token,
                        "name": m.customer.name,
                        "phone": m.customer.phone,
                        "points": m.points,
                        "rewards_earned": m.rewards_earned,
                        "updated_at": m.updated_at.isoformat(),
                    }
                    for m in members
                ]
            }
        )


@method_decorator(business_required, name="dispatch")
class ProvisionalCustomerView(LoyaltyView):
    """Issue a new customer card at the counter; the card joins this business."""

    def post(self, request):
        customer = customer_service.create_provisional(self.current_business())
        return JsonResponse(
            {"customer": {"token": customer.token, "qr_data_url": customer.qr_data_url}},
            status=201,
        )


# =============================================================================
# Customer device
# =============================================================================


class CustomerSignupView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        customer = customer_service.signup(
            phone=data.get("phone", ""),
            password=data.get("password", ""),
            name=data.get("name", ""),
        )
        LoyaltySession.open(request, CUSTOMER, customer)
        return JsonResponse({"token": customer.token, "qr_data_url": customer.qr_data_url}, status=201)


class CustomerLoginView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        customer = auth_service.authenticate_customer(data.get("phone", ""), data.get("password", ""))
        LoyaltySession.open(request, CUSTOMER, customer)
        return JsonResponse({"token": customer.token})


class CustomerCardView(LoyaltyView):
    """
    GET /customer/?token=...&join=...&discount_id=...

    ``join`` joins the business before the card is returned. An unknown
    business or discount is reported next to the card, not as an error.
    """

    def get(self, request):
        token = request.GET.get("token", "")
        customer = customer_service.get_by_token(token)
        if customer is None:
            raise QroyalError("CUSTOMER_NOT_FOUND")

        data = {
            "qr_data_url": customer.qr_data_url,
            "poll_interval_seconds": qroyal_settings.POLL_INTERVAL_SECONDS,
        }

        join = request.GET.get("join")
        if join:
            try:
                membership, created = customer_service.join_business(token, join)
            except QroyalError as exc:
                data["join"] = {"error_code": exc.code, "message": translate(exc.code.lower())}
            else:
                data["join"] = {
                    "business_id": membership.business_id,
                    "new_member": created,
                    "message": f"{translate('join_success')}, {membership.business.display_name}!",
                }

        discount_id = request.GET.get("discount_id")
        if discount_id:
            discount = discount_service.get(discount_id)
            if discount is None:
                data["discount"] = {"error_code": "DISCOUNT_NOT_FOUND", "message": translate("discount_not_found")}
            else:
                data["discount"] = asdict(discount_service.to_info(discount))

        data["customer"] = customer_service.snapshot(token).as_dict()
        return JsonResponse(data)


class CustomerStateView(LoyaltyView):
    """Polling endpoint for customer displays."""

    def get(self, request):
        snapshot = customer_service.snapshot(request.GET.get("token", ""))
        if snapshot is None:
            raise QroyalError("CUSTOMER_NOT_FOUND")
        return JsonResponse(snapshot.as_dict())


class CustomerSetupView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        customer = customer_service.complete_setup(
            data.get("token", ""),
            name=data.get("name", ""),
            phone=data.get("phone", ""),
        )
        return JsonResponse({"token": customer.token, "name": customer.name, "phone": customer.phone})


class CustomerJoinView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        membership, created = customer_service.join_business(data.get("token", ""), data.get("business_id"))
        return JsonResponse(
            {
                "business_id": membership.business_id,
                "points": membership.points,
                "new_member": created,
                "message": f"{translate('join_success')}, {membership.business.display_name}!",
            },
            status=201 if created else 200,
        )


class CustomerLeaveView(LoyaltyView):
    def post(self, request):
        data = self.payload()
        if not customer_service.leave_business(data.get("token", ""), data.get("business_id")):
            raise QroyalError("MEMBERSHIP_NOT_FOUND")
        return JsonResponse({"message": translate("leave_success")})


@method_decorator(customer_required, name="dispatch")
class CustomerProfileView(LoyaltyView):
    """Profile of the logged-in customer: GET, POST (name, phone), DELETE."""

    def get(self, request):
        customer = self.current_customer()
        return JsonResponse({"token": customer.token, "name": customer.name, "phone": customer.phone})

    def post(self, request):
        data = self.payload()
        fields = {key: data[key] for key in customer_service.UPDATABLE_FIELDS if key in data}
        customer = customer_service.update(self.current_customer().token, **fields)
        return JsonResponse(
            {
                "token": customer.token,
                "name": customer.name,
                "phone": customer.phone,
                "message": translate("profile_saved"),
            }
        )

    def delete(self, request):
        customer_service.delete(self.current_customer().token)
        LoyaltySession.close(request)
        return JsonResponse({"message": translate("account_deleted")})

    def current_customer(self):
        customer = customer_service.get_by_token(self.request.loyalty_session.token)
        if customer is None:
            raise QroyalError("CUSTOMER_NOT_FOUND")
        return customer


# =============================================================================
# Public
# =============================================================================


class DiscountListView(LoyaltyView):
    def get(self, request):
        business_id = request.GET.get("business_id") or None
        if business_id is not None and not business_id.isdigit():
            raise QroyalError("INVALID_INPUT", fields=["business_id"])
        discounts = discount_service.available(business_id=business_id)
        return JsonResponse({"discounts": [asdict(discount_service.to_info(d)) for d in discounts]})


class BusinessSearchView(LoyaltyView):
    """GET /businesses/?q=... for customers looking for a business to join."""

    def get(self, request):
        businesses = business_service.search(request.GET.get("q", "").strip() or None)
        return JsonResponse({"businesses": [public_business_dict(b) for b in businesses]})


class BusinessProfileView(LoyaltyView):
    """Public profile of one business with its available discounts."""

    def get(self, request, business_id):
        business = business_service.get(business_id)
        if business is None:
            raise QroyalError("BUSINESS_NOT_FOUND")
        discounts = discount_service.available(business_id=business.pk)
        return JsonResponse(
            {
                "business": public_business_dict(business),
                "discounts": [asdict(discount_service.to_info(d)) for d in discounts],
            }
        )


class QRImageView(LoyaltyView):
    """PNG of a customer or business code (stored render when available)."""

    def get(self, request, token):
        customer = customer_service.get_by_token(token)
        if customer is not None:
            subject, payload, style = customer, customer_service.qr_payload(customer), None
        else:
            business = business_service.get_by_token(token)
            if business is None:
                raise QroyalError("CUSTOMER_NOT_FOUND")
            subject, payload, style = business, business.token, QRStyle.for_business(business)

        prefix = "data:image/png;base64,"
        if subject.qr_data_url.startswith(prefix):
            png = base64.b64decode(subject.qr_data_url[len(prefix):])
        else:
            png = render_identity_image(payload, style)

        response = HttpResponse(png, content_type="image/png")
        response["Cache-Control"] = "private, max-age=300"
        return response
