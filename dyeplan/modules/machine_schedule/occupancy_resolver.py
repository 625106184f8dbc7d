from bisect import bisect_right
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from dyeplan.core.catalog import PlanningCatalog, StatusTone
from dyeplan.core.models.production.machine_schedule import MachineSchedule, ScheduledSlot
from dyeplan.core.schemas.production.machine_schedule import GridCell, MachineGridRow

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
MINUTES_PER_DAY = 24 * 60
HOURLY_TICKS = 24


# ============================================================================
# Time Helpers
# ============================================================================

def combine_date_time(date_str: str, time_str: str) -> Optional[datetime]:
    """
    Combine "YYYY-MM-DD" and "HH:MM" into one instant; None if either is invalid.

    Example: "2026-01-20" + "08:00" -> 2026-01-20 08:00:00
    """
    try:
        return datetime.strptime(f"{date_str.strip()} {time_str.strip()}", f"{DATE_FORMAT} {TIME_FORMAT}")
    except (ValueError, AttributeError):
        return None


def minutes_of_day(time_str: str) -> Optional[int]:
    """Minutes since midnight for "HH:MM"; None if invalid."""
    try:
        parsed = datetime.strptime(time_str.strip(), TIME_FORMAT)
    except (ValueError, AttributeError):
        return None
    return parsed.hour * 60 + parsed.minute


def slot_minutes(slot: ScheduledSlot) -> Optional[Tuple[int, int]]:
    """(start, end) minutes of a slot on its day; None if either bound is invalid."""
    start = minutes_of_day(slot.start_time)
    end = minutes_of_day(slot.end_time)
    if start is None or end is None:
        return None
    return start, end


def find_overlap(
    slots: Iterable[ScheduledSlot],
    candidate: ScheduledSlot,
) -> Optional[ScheduledSlot]:
    """
    First existing slot overlapping the candidate's [start, end), if any.

    Overlap Logic: (StartA < EndB) and (EndA > StartB)
    """
    bounds = slot_minutes(candidate)
    if bounds is None:
        return None
    new_start, new_end = bounds

    for slot in slots:
        existing = slot_minutes(slot)
        if existing is None:
            continue
        exist_start, exist_end = existing
        if new_start < exist_end and new_end > exist_start:
            return slot
    return None


# ============================================================================
# Slot Index
# ============================================================================

class SlotIndex:
    """
    One machine's slots sorted by start time for binary-search lookups.

    Bookings made through MachineScheduleService never overlap. When stored
    slots do overlap, lookups scan in list order instead, so the answer is
    always the first matching slot, as with resolve_occupancy.
    Slots whose end is not after their start can never be occupied on a
    single day and are left out.
    """

    def __init__(self, slots: Sequence[ScheduledSlot]):
        entries = []
        for position, slot in enumerate(slots):
            bounds = slot_minutes(slot)
            if bounds is None:
                logger.warning(
                    f"Skipping slot with invalid times: plan='{slot.plan_id}', "
                    f"start='{slot.start_time}', end='{slot.end_time}'"
                )
                continue
            start, end = bounds
            if end <= start:
                continue
            entries.append((start, position, end, slot))

        # Still in list order here
        self._in_list_order = list(entries)

        entries.sort(key=lambda entry: (entry[0], entry[1]))
        self._starts = [entry[0] for entry in entries]
        self._entries = entries
        self.overlapping = any(
            later[0] < earlier[2] for earlier, later in zip(entries, entries[1:])
        )

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, time_of_day: str) -> Optional[ScheduledSlot]:
        """Slot occupying the given HH:MM, or None."""
        query = minutes_of_day(time_of_day)
        if query is None:
            return None

        if self.overlapping:
            for start, _, end, slot in self._in_list_order:
                if start <= query < end:
                    return slot
            return None

        i = bisect_right(self._starts, query) - 1
        if i < 0:
            return None

        _, _, end, slot = self._entries[i]
        return slot if query < end else None


# ============================================================================
# Resolver
# ============================================================================

class MachineOccupancyResolver:
    """
    Answers "which slot occupies machine X at this instant" and classifies
    machine status / slot priority for display.

    The catalog is passed in explicitly so display mappings follow the
    configuration loaded at startup.
    """

    def __init__(self, catalog: PlanningCatalog):
        self.catalog = catalog

    # -------------------------
    # Core Lookups
    # -------------------------

    @staticmethod
    def generate_time_slots(ticks: int = HOURLY_TICKS) -> List[str]:
        """
        Evenly spaced HH:MM ticks covering one day.

        Examples:
            >>> MachineOccupancyResolver.generate_time_slots()[:3]
            ['00:00', '01:00', '02:00']
            >>> MachineOccupancyResolver.generate_time_slots(48)[1]
            '00:30'

        Raises:
            ValueError: If ticks does not divide a day into whole minutes
        """
        if ticks <= 0 or MINUTES_PER_DAY % ticks != 0:
            raise ValueError(f"ticks must divide {MINUTES_PER_DAY} minutes evenly, got {ticks}")

        step = MINUTES_PER_DAY // ticks
        return [
            f"{minute // 60:02d}:{minute % 60:02d}"
            for minute in range(0, MINUTES_PER_DAY, step)
        ]

    @staticmethod
    def resolve_occupancy(
        slots: Sequence[ScheduledSlot],
        date: str,
        time_of_day: str,
    ) -> Optional[ScheduledSlot]:
        """
        First slot (in list order) whose [start, end) on `date` contains the instant.

        Start is inclusive, end exclusive. Slot times are combined with the
        query date, so a slot ending past midnight (end <= start) never matches.

        Returns:
            ScheduledSlot or None when the machine is free (or the query is invalid)
        """
        query = combine_date_time(date, time_of_day)
        if query is None:
            logger.warning(f"Invalid occupancy query: date='{date}', time='{time_of_day}'")
            return None

        for slot in slots:
            start = combine_date_time(date, slot.start_time)
            end = combine_date_time(date, slot.end_time)
            if start is None or end is None:
                logger.warning(
                    f"Skipping slot with invalid times: plan='{slot.plan_id}', "
                    f"start='{slot.start_time}', end='{slot.end_time}'"
                )
                continue

            if start <= query < end:
                return slot

        return None

    # -------------------------
    # Display Classification
    # -------------------------

    def status_tone(self, status: Optional[str]) -> StatusTone:
        """available->neutral, occupied->informational, maintenance->warning, breakdown->critical."""
        return self.catalog.status_tone(status)

    def priority_salience(self, priority: Optional[str]) -> int:
        """0 = least salient (low / unrecognized) up to 3 = urgent."""
        return self.catalog.priority_rank(priority)

    def priority_color(self, priority: Optional[str]) -> str:
        return self.catalog.priority_color(priority)

    def status_counts(self, machines: Iterable[MachineSchedule]) -> Dict[str, int]:
        """Machines per known status (unknown statuses are not counted)."""
        counts = {status: 0 for status in self.catalog.machine_status_tones}
        for machine in machines:
            if machine.status in counts:
                counts[machine.status] += 1
        return counts

    # -------------------------
    # Grid
    # -------------------------

    def build_row(
        self,
        machine: MachineSchedule,
        date: str,
        time_slots: Sequence[str],
    ) -> MachineGridRow:
        """One grid row: the occupying slot per tick, else the machine's own status."""
        index = SlotIndex(machine.scheduled_plans)
        date_ok = combine_date_time(date, "00:00") is not None
        machine_tone = self.status_tone(machine.status)

        cells = []
        for time in time_slots:
            slot = index.lookup(time) if date_ok else None
            if slot is not None:
                cells.append(GridCell(
                    time=time,
                    slot=slot,
                    color=self.priority_color(slot.priority),
                    tone=self.status_tone("occupied"),
                ))
            else:
                cells.append(GridCell(time=time, tone=machine_tone))

        return MachineGridRow(
            machine_no=machine.machine_no,
            machine_type=machine.machine_type,
            capacity=machine.capacity,
            status=machine.status,
            tone=machine_tone,
            cells=cells,
        )

    def build_grid(
        self,
        machines: Sequence[MachineSchedule],
        date: str,
        ticks: int = HOURLY_TICKS,
    ) -> List[MachineGridRow]:
        """Rows for every machine across the day's ticks."""
        time_slots = self.generate_time_slots(ticks)
        return [self.build_row(machine, date, time_slots) for machine in machines]
