"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from datetime import date, timedelta
from zoneinfo import ZoneInfo

import structlog
from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.cache import get_cached_occurrences
from bookings.domain import Money, TimeSlotKey
from bookings.domain.errors import (
    CapacityError,
    ConsistencyError,
    DomainError,
    InvalidBookingError,
    InvalidInputError,
    NotFoundError,
    PaymentFailedError,
    PriceChangedError,
    PricingError,
    RefundError,
)
from bookings.handlers.serializers import (
    AvailabilityChangeSerializer,
    BookingRecordSerializer,
    BookingRequestSerializer,
    OccurrenceQuerySerializer,
    OccurrenceSerializer,
    PriceQuoteSerializer,
    ProgramCreateSerializer,
    ProgramSerializer,
    RefundSerializer,
)
from bookings.payments import get_payment_processor
from bookings.services.booking_reconciler import BookingReconciler
from bookings.services.catalog_service import CatalogService
from bookings.services.checkout import CheckoutService
from bookings.services.program_builder import create_program
from bookings.stores.django_store import DjangoBookingStore

logger = structlog.get_logger(__name__)

_ERROR_STATUS = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (PricingError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityError, status.HTTP_409_CONFLICT),
    (ConsistencyError, status.HTTP_409_CONFLICT),
    (RefundError, status.HTTP_409_CONFLICT),
    (PriceChangedError, status.HTTP_409_CONFLICT),
    (PaymentFailedError, status.HTTP_402_PAYMENT_REQUIRED),
)


def error_response(exc: DomainError) -> Response:
    """Render a domain error as `{"code", "message"}` with its HTTP status."""
    for error_type, http_status in _ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        http_status = status.HTTP_400_BAD_REQUEST
    body = {"code": exc.code.value, "message": exc.message}
    day = getattr(exc, "date", None)
    if day is not None:
        body["date"] = day.isoformat()
    return Response(body, status=http_status)


def _catalog() -> CatalogService:
    return CatalogService(
        DjangoBookingStore(),
        tz=ZoneInfo(settings.BOOKINGS["TIME_ZONE"]),
        max_occurrences=settings.BOOKINGS["MAX_OCCURRENCES"],
    )


def _reconciler() -> BookingReconciler:
    return BookingReconciler(DjangoBookingStore(), clock=timezone.now)


class OccurrenceListView(APIView):
    """Handler for GET /api/templates/{template_id}/occurrences"""

    def get(self, request: Request, template_id: str) -> Response:
        query = OccurrenceQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        config = settings.BOOKINGS

        window_start = query.validated_data.get("start") or timezone.localdate(
            timezone=ZoneInfo(config["TIME_ZONE"])
        )
        window_end = query.validated_data.get("end") or window_start + timedelta(
            days=config["DEFAULT_WINDOW_DAYS"]
        )
        window_end = min(window_end, window_start + timedelta(days=config["MAX_WINDOW_DAYS"]))

        catalog = _catalog()

        def build() -> list[dict]:
            occurrences = catalog.list_occurrences(template_id, window_start, window_end)
            return list(OccurrenceSerializer(occurrences, many=True).data)

        try:
            data = get_cached_occurrences(template_id, window_start, window_end, build)
        except DomainError as exc:
            return error_response(exc)
        return Response(data)


class ProgramCreateView(APIView):
    """Handler for POST /api/programs"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request) -> Response:
        payload = ProgramCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        try:
            program = create_program(
                data["name"],
                data["start_date"],
                data["end_date"],
                Money(data["price_per_day_per_participant"]),
                data["max_participants_per_day"],
                exclude_dates=data["exclude_dates"],
                slot_config=payload.slot_config(),
                day_pricing_tiers=payload.pricing_tiers(),
                discount=payload.program_discount(),
                description=data["description"],
            )
            program = _catalog().add_program(program)
        except DomainError as exc:
            return error_response(exc)
        return Response(ProgramSerializer(program).data, status=status.HTTP_201_CREATED)


class ProgramAvailabilityView(APIView):
    """Handler for GET /api/programs/{program_id}/availability"""

    def get(self, request: Request, program_id: str) -> Response:
        try:
            program = _catalog().get_program(program_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(ProgramSerializer(program).data)


class DayAvailabilityView(APIView):
    """Handler for POST /api/programs/{program_id}/days/{day}"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request, program_id: str, day: str) -> Response:
        payload = AvailabilityChangeSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        time_slot = TimeSlotKey(**data["time_slot"]) if data["time_slot"] else None
        try:
            parsed_day = _parse_day(day)
            program = _catalog().set_availability(
                program_id, parsed_day, data["enabled"], time_slot
            )
        except DomainError as exc:
            return error_response(exc)
        logger.info(
            "availability_changed",
            program_id=program_id,
            date=day,
            time_slot=str(time_slot) if time_slot else None,
            enabled=data["enabled"],
            staff=request.user.get_username(),
        )
        return Response(ProgramSerializer(program).data)


class QuoteView(APIView):
    """Handler for POST /api/bookings/quote"""

    def post(self, request: Request) -> Response:
        payload = BookingRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            quote = _reconciler().quote(payload.to_domain())
        except DomainError as exc:
            return error_response(exc)
        return Response(PriceQuoteSerializer(quote).data)


class BookingCreateView(APIView):
    """Handler for POST /api/bookings"""

    def post(self, request: Request) -> Response:
        payload = BookingRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        checkout = CheckoutService(_reconciler(), get_payment_processor())
        try:
            record = checkout.checkout(
                payload.to_domain(), payload.validated_data["payment_token"]
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(BookingRecordSerializer(record).data, status=status.HTTP_201_CREATED)


class BookingCancelView(APIView):
    """Handler for POST /api/bookings/{booking_id}/cancel"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request, booking_id: str) -> Response:
        try:
            record = _reconciler().cancel_booking(booking_id)
        except DomainError as exc:
            return error_response(exc)
        return Response(BookingRecordSerializer(record).data)


class BookingRefundView(APIView):
    """Handler for POST /api/bookings/{booking_id}/refund"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request, booking_id: str) -> Response:
        payload = RefundSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            record = _reconciler().record_refund(booking_id, payload.validated_data["amount"])
        except DomainError as exc:
            return error_response(exc)
        return Response(BookingRecordSerializer(record).data)


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidBookingError(f"Invalid date: {value}") from exc
