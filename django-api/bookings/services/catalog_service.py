"""Catalog service - offerings, their dates and their capacity.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

from datetime import date, tzinfo

import structlog

from bookings.domain import EventTemplate, Occurrence, ProgramId, ReservationProgram, TemplateId, TimeSlotKey
from bookings.domain.errors import InvalidIdError, ProgramNotFoundError, TemplateNotFoundError
from bookings.services import occurrence_expander
from bookings.services.availability_ledger import AvailabilityLedger
from bookings.stores.interfaces import BookingStore

logger = structlog.get_logger(__name__)


class CatalogService:
    """Service for browsing offerings and managing program capacity."""

    def __init__(
        self,
        store: BookingStore,
        ledger: AvailabilityLedger | None = None,
        tz: tzinfo | None = None,
        max_occurrences: int | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger or AvailabilityLedger()
        self._tz = tz
        self._max_occurrences = max_occurrences

    def get_template(self, template_id: str) -> EventTemplate:
        """Return an event template by ID.

        Raises:
            InvalidIdError: If the template_id is not a valid UUID.
            TemplateNotFoundError: If the template does not exist.
        """
        try:
            parsed = TemplateId.from_string(template_id)
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidIdError(template_id) from exc
        template = self._store.get_event_template(parsed)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def list_occurrences(
        self, template_id: str, window_start: date, window_end: date
    ) -> list[Occurrence]:
        """Return the template's occurrences within the window, in date order.

        Raises:
            InvalidIdError: If the template_id is not a valid UUID.
            TemplateNotFoundError: If the template does not exist.
            InvalidWindowError: If window_end is before window_start.
        """
        template = self.get_template(template_id)
        return list(
            occurrence_expander.expand(
                template,
                window_start,
                window_end,
                tz=self._tz,
                limit=self._max_occurrences,
            )
        )

    def get_program(self, program_id: str) -> ReservationProgram:
        """Return a reservation program with its daily availability.

        Raises:
            InvalidIdError: If the program_id is not a valid UUID.
            ProgramNotFoundError: If the program does not exist.
        """
        program = self._store.load_program(self._parse_program_id(program_id))
        if program is None:
            raise ProgramNotFoundError(program_id)
        return program

    def add_program(self, program: ReservationProgram) -> ReservationProgram:
        """Persist a newly built program."""
        with self._store.atomic():
            self._store.save_program(program)
        logger.info(
            "program_created",
            program_id=str(program.id),
            days=len(program.daily_availability),
            time_slots=program.enable_time_slots,
        )
        return program

    def set_availability(
        self,
        program_id: str,
        day: date,
        enabled: bool,
        time_slot: TimeSlotKey | None = None,
    ) -> ReservationProgram:
        """Staff opens or closes a day (or one of its slots).

        Raises:
            InvalidIdError: If the program_id is not a valid UUID.
            ProgramNotFoundError: If the program does not exist.
            DateNotOfferedError: If the program has no row for the date.
            SlotNotOfferedError: If the day has no matching slot.
        """
        parsed = self._parse_program_id(program_id)
        with self._store.atomic():
            program = self._store.load_program(parsed, for_update=True)
            if program is None:
                raise ProgramNotFoundError(program_id)
            if enabled:
                program = self._ledger.enable(program, day, time_slot)
            else:
                program = self._ledger.disable(program, day, time_slot)
            self._store.save_program(program)
        return program

    @staticmethod
    def _parse_program_id(program_id: str) -> ProgramId:
        try:
            return ProgramId.from_string(program_id)
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidIdError(program_id) from exc
