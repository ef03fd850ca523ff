import logging
import sqlite3
import unicodedata
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from threading import Lock
from typing import Any, Iterator, List, Optional

from booking import config
from booking.models import (
    Appointment,
    AppointmentView,
    BusinessHours,
    Location,
    Offering,
    SearchServiceResult,
    ServiceProvider,
    ServiceProviderDetails,
    TimeRange,
)
from booking.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    SchedulingValidationError,
    SlotConstraintViolation,
)

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
SLOT_CONFLICT_MARKER = "appointment_slot_conflict"
TOP_SEARCH_LIMIT = 5


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT)


def normalize_name(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().lower()


def validate_business_hours(business_hours: List[BusinessHours]) -> None:
    if not business_hours:
        raise SchedulingValidationError("Business hours are required")
    seen: set[int] = set()
    for hours in business_hours:
        if hours.day_of_week in seen:
            raise SchedulingValidationError(f"Duplicate business hours for day {hours.day_of_week}")
        seen.add(hours.day_of_week)
        if hours.is_open and hours.open_time >= hours.close_time:
            raise SchedulingValidationError(
                f"Invalid business hours for day {hours.day_of_week}: open time must be before close time"
            )


@dataclass
class ScheduleStore:
    db_path: str

    def __post_init__(self) -> None:
        self._lock = Lock()
        path = Path(self.db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(path)
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, check_same_thread=False, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._lock:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS providers (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        owner_id TEXT NOT NULL,
                        name TEXT NOT NULL UNIQUE,
                        description TEXT NOT NULL DEFAULT '',
                        phone_number TEXT NOT NULL DEFAULT '',
                        address TEXT NOT NULL,
                        city TEXT NOT NULL,
                        zip_code TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS business_hours (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
                        day_of_week INTEGER NOT NULL CHECK (day_of_week BETWEEN 0 AND 6),
                        open_time TEXT NOT NULL,
                        close_time TEXT NOT NULL,
                        is_open INTEGER NOT NULL DEFAULT 1,
                        UNIQUE (provider_id, day_of_week)
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS services (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        normalized_name TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    "CREATE UNIQUE INDEX IF NOT EXISTS idx_services_name ON services (lower(name))"
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS provider_services (
                        provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
                        service_id INTEGER NOT NULL REFERENCES services(id),
                        description TEXT NOT NULL DEFAULT '',
                        duration_minutes INTEGER NOT NULL CHECK (duration_minutes > 0),
                        price REAL NOT NULL,
                        is_available INTEGER NOT NULL DEFAULT 1,
                        PRIMARY KEY (provider_id, service_id)
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS appointments (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
                        service_id INTEGER NOT NULL,
                        customer_id TEXT NOT NULL,
                        start_time TEXT NOT NULL,
                        end_time TEXT NOT NULL,
                        status TEXT NOT NULL,
                        notes TEXT NOT NULL DEFAULT '',
                        created_at TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_appointments_slot
                    ON appointments (provider_id, service_id, start_time)
                    """
                )
                conn.execute("CREATE INDEX IF NOT EXISTS idx_appointments_end ON appointments (end_time)")
                # Writers are serialized by SQLite, so this check and the insert
                # it guards are atomic against any concurrent booking.
                conn.execute(
                    f"""
                    CREATE TRIGGER IF NOT EXISTS appointments_no_overlap
                    BEFORE INSERT ON appointments
                    WHEN NEW.status != 'Cancelled'
                    BEGIN
                        SELECT RAISE(ABORT, '{SLOT_CONFLICT_MARKER}')
                        WHERE EXISTS (
                            SELECT 1 FROM appointments
                            WHERE provider_id = NEW.provider_id
                              AND service_id = NEW.service_id
                              AND status != 'Cancelled'
                              AND start_time < NEW.end_time
                              AND end_time > NEW.start_time
                        );
                    END
                    """
                )

    # Scheduling contract used by the availability engine, the booking
    # transaction and the cleanup sweeper.

    def get_offering(self, provider_id: int, service_id: int) -> Optional[Offering]:
        with self._lock:
            with self._connect() as conn:
                row = self._offering_row(conn, provider_id, service_id)
        return self._row_to_offering(row) if row else None

    def get_open_hours(self, provider_id: int, day_of_week: int) -> Optional[BusinessHours]:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute(
                    """
                    SELECT day_of_week, open_time, close_time, is_open
                    FROM business_hours
                    WHERE provider_id = ? AND day_of_week = ? AND is_open = 1
                    """,
                    (provider_id, day_of_week),
                ).fetchone()
        return self._row_to_business_hours(row) if row else None

    def list_non_cancelled(self, provider_id: int, service_id: int, day: date) -> List[TimeRange]:
        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT start_time, end_time FROM appointments
                    WHERE provider_id = ? AND service_id = ?
                      AND status != 'Cancelled'
                      AND start_time < ? AND end_time > ?
                    ORDER BY start_time
                    """,
                    (provider_id, service_id, format_timestamp(day_end), format_timestamp(day_start)),
                ).fetchall()
        return [
            TimeRange(start=parse_timestamp(row["start_time"]), end=parse_timestamp(row["end_time"]))
            for row in rows
        ]

    def insert_appointment(self, appointment: Appointment) -> Appointment:
        with self._lock:
            with self._connect() as conn:
                try:
                    cursor = conn.execute(
                        """
                        INSERT INTO appointments
                            (provider_id, service_id, customer_id, start_time, end_time, status, notes, created_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            appointment.provider_id,
                            appointment.service_id,
                            appointment.customer_id,
                            format_timestamp(appointment.start_time),
                            format_timestamp(appointment.end_time),
                            appointment.status,
                            appointment.notes,
                            format_timestamp(datetime.now()),
                        ),
                    )
                except sqlite3.IntegrityError as exc:
                    if SLOT_CONFLICT_MARKER in str(exc):
                        raise SlotConstraintViolation(str(exc)) from exc
                    raise
        return appointment.model_copy(update={"id": cursor.lastrowid})

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            with self._connect() as conn:
                cursor = conn.execute("DELETE FROM appointments WHERE end_time < ?", (format_timestamp(now),))
                return cursor.rowcount

    # Providers and business hours

    def create_provider(
        self,
        *,
        owner_id: str,
        name: str,
        description: str,
        phone_number: str,
        location: Location,
        business_hours: List[BusinessHours],
    ) -> ServiceProviderDetails:
        validate_business_hours(business_hours)
        clean_name = name.strip()
        with self._lock:
            with self._connect() as conn:
                existing = conn.execute("SELECT id FROM providers WHERE name = ?", (clean_name,)).fetchone()
                if existing:
                    raise ConflictError("Service provider with this name already exists")
                cursor = conn.execute(
                    """
                    INSERT INTO providers (owner_id, name, description, phone_number, address, city, zip_code, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        owner_id,
                        clean_name,
                        description.strip(),
                        phone_number,
                        location.address.strip(),
                        location.city.strip(),
                        location.zip_code.strip(),
                        format_timestamp(datetime.now()),
                    ),
                )
                provider_id = int(cursor.lastrowid)
                self._write_business_hours(conn, provider_id, business_hours)
                details = self._load_provider_details(conn, provider_id)
        logger.info("Created provider %s (%s) for owner %s", provider_id, clean_name, owner_id)
        return details

    def get_provider(self, provider_id: int) -> ServiceProvider:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute("SELECT * FROM providers WHERE id = ?", (provider_id,)).fetchone()
        if not row:
            raise NotFoundError("Service provider not found")
        return self._row_to_provider(row)

    def get_provider_details(self, provider_id: int) -> ServiceProviderDetails:
        with self._lock:
            with self._connect() as conn:
                return self._load_provider_details(conn, provider_id)

    def list_providers(self, city: Optional[str] = None, owner_id: Optional[str] = None) -> List[ServiceProvider]:
        query = "SELECT * FROM providers"
        clauses: List[str] = []
        params: List[Any] = []
        if city:
            clauses.append("lower(city) = ?")
            params.append(city.strip().lower())
        if owner_id:
            clauses.append("owner_id = ?")
            params.append(owner_id)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY name"
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(query, tuple(params)).fetchall()
        return [self._row_to_provider(row) for row in rows]

    def update_provider(
        self,
        *,
        provider_id: int,
        actor_user_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> ServiceProvider:
        """Updates the given non-blank fields; raises when nothing actually changes."""
        with self._lock:
            with self._connect() as conn:
                self._assert_owner(conn, provider_id, actor_user_id)
                row = self._require_provider_row(conn, provider_id)

                changes: dict[str, Any] = {}
                if name is not None and name.strip() and name.strip() != row["name"]:
                    taken = conn.execute(
                        "SELECT id FROM providers WHERE name = ? AND id != ?",
                        (name.strip(), provider_id),
                    ).fetchone()
                    if taken:
                        raise ConflictError("Service provider with this name already exists")
                    changes["name"] = name.strip()
                if description is not None and description.strip() and description.strip() != row["description"]:
                    changes["description"] = description.strip()
                if phone_number is not None and phone_number.strip() and phone_number.strip() != row["phone_number"]:
                    changes["phone_number"] = phone_number.strip()
                if not changes:
                    raise SchedulingValidationError("No changes detected")

                assignments = ", ".join(f"{column} = ?" for column in changes)
                conn.execute(
                    f"UPDATE providers SET {assignments} WHERE id = ?",
                    (*changes.values(), provider_id),
                )
                row = self._require_provider_row(conn, provider_id)
        logger.info("Updated provider %s fields %s", provider_id, sorted(changes))
        return self._row_to_provider(row)

    def replace_business_hours(
        self,
        *,
        provider_id: int,
        actor_user_id: str,
        business_hours: List[BusinessHours],
    ) -> List[BusinessHours]:
        validate_business_hours(business_hours)
        with self._lock:
            with self._connect() as conn:
                self._assert_owner(conn, provider_id, actor_user_id)
                conn.execute("DELETE FROM business_hours WHERE provider_id = ?", (provider_id,))
                self._write_business_hours(conn, provider_id, business_hours)
                return self._load_business_hours(conn, provider_id)

    def delete_provider(self, *, provider_id: int, actor_user_id: str) -> None:
        with self._lock:
            with self._connect() as conn:
                self._assert_owner(conn, provider_id, actor_user_id)
                # Business hours, offerings and appointments cascade.
                conn.execute("DELETE FROM providers WHERE id = ?", (provider_id,))
        logger.info("Deleted provider %s", provider_id)

    # Offerings and catalog

    def require_offering(self, provider_id: int, service_id: int) -> Offering:
        offering = self.get_offering(provider_id, service_id)
        if offering is None:
            raise NotFoundError("Service not found for the specified service provider")
        return offering

    def list_offerings(self, provider_id: int) -> List[Offering]:
        with self._lock:
            with self._connect() as conn:
                self._require_provider_row(conn, provider_id)
                return self._load_offerings(conn, provider_id)

    def list_offerings_by_service(self, service_id: int) -> List[Offering]:
        """Every provider's offering of one catalog service."""
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT ps.*, s.name FROM provider_services ps
                    JOIN services s ON s.id = ps.service_id
                    WHERE ps.service_id = ?
                    ORDER BY ps.provider_id
                    """,
                    (service_id,),
                ).fetchall()
        if not rows:
            raise NotFoundError("No services found for the specified type")
        return [self._row_to_offering(row) for row in rows]

    def add_offering(
        self,
        *,
        provider_id: int,
        actor_user_id: str,
        name: str,
        description: str,
        price: float,
        duration_minutes: int,
    ) -> Offering:
        clean_name = name.strip()
        with self._lock:
            with self._connect() as conn:
                self._assert_owner(conn, provider_id, actor_user_id)
                service_id = self._resolve_catalog_service(conn, clean_name)
                if self._offering_row(conn, provider_id, service_id):
                    raise ConflictError("This provider already offers a service with this name")
                conn.execute(
                    """
                    INSERT INTO provider_services (provider_id, service_id, description, duration_minutes, price, is_available)
                    VALUES (?, ?, ?, ?, ?, 1)
                    """,
                    (provider_id, service_id, description.strip(), duration_minutes, price),
                )
                row = self._offering_row(conn, provider_id, service_id)
        return self._row_to_offering(row)

    def update_offering(
        self,
        *,
        provider_id: int,
        service_id: int,
        actor_user_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[float] = None,
        duration_minutes: Optional[int] = None,
    ) -> Offering:
        with self._lock:
            with self._connect() as conn:
                row = self._offering_row(conn, provider_id, service_id)
                if not row:
                    raise NotFoundError("Service not found")
                self._assert_owner(conn, provider_id, actor_user_id)

                updated = False
                # The catalog entry is shared; a rename re-points this provider's
                # offering and its appointments at the catalog entry for the new name.
                if name is not None and name.strip() and name.strip() != row["name"]:
                    new_service_id = self._resolve_catalog_service(conn, name.strip())
                    if new_service_id != service_id:
                        if self._offering_row(conn, provider_id, new_service_id):
                            raise ConflictError("This provider already offers a service with this name")
                        conn.execute(
                            "UPDATE provider_services SET service_id = ? WHERE provider_id = ? AND service_id = ?",
                            (new_service_id, provider_id, service_id),
                        )
                        conn.execute(
                            "UPDATE appointments SET service_id = ? WHERE provider_id = ? AND service_id = ?",
                            (new_service_id, provider_id, service_id),
                        )
                        self._drop_unused_catalog_service(conn, service_id)
                        service_id = new_service_id
                        updated = True

                changes: dict[str, Any] = {}
                if description is not None and description.strip() != row["description"]:
                    changes["description"] = description.strip()
                # Existing appointments keep the end time they were booked with.
                if duration_minutes is not None and duration_minutes != row["duration_minutes"]:
                    changes["duration_minutes"] = duration_minutes
                if price is not None and price != row["price"]:
                    changes["price"] = price
                if changes:
                    assignments = ", ".join(f"{column} = ?" for column in changes)
                    conn.execute(
                        f"UPDATE provider_services SET {assignments} WHERE provider_id = ? AND service_id = ?",
                        (*changes.values(), provider_id, service_id),
                    )
                    updated = True

                if not updated:
                    raise SchedulingValidationError("No changes detected")
                row = self._offering_row(conn, provider_id, service_id)
        return self._row_to_offering(row)

    def toggle_offering_availability(self, *, provider_id: int, service_id: int, actor_user_id: str) -> Offering:
        with self._lock:
            with self._connect() as conn:
                row = self._offering_row(conn, provider_id, service_id)
                if not row:
                    raise NotFoundError("Service not found")
                self._assert_owner(conn, provider_id, actor_user_id)
                conn.execute(
                    "UPDATE provider_services SET is_available = ? WHERE provider_id = ? AND service_id = ?",
                    (0 if row["is_available"] else 1, provider_id, service_id),
                )
                row = self._offering_row(conn, provider_id, service_id)
        return self._row_to_offering(row)

    def delete_offering(self, *, provider_id: int, service_id: int, actor_user_id: str) -> None:
        with self._lock:
            with self._connect() as conn:
                if not self._offering_row(conn, provider_id, service_id):
                    raise NotFoundError("Service not found")
                self._assert_owner(conn, provider_id, actor_user_id)
                active = conn.execute(
                    """
                    SELECT 1 FROM appointments
                    WHERE provider_id = ? AND service_id = ? AND status != 'Cancelled'
                    LIMIT 1
                    """,
                    (provider_id, service_id),
                ).fetchone()
                if active:
                    raise ConflictError("Service has active appointments")
                conn.execute(
                    "DELETE FROM provider_services WHERE provider_id = ? AND service_id = ?",
                    (provider_id, service_id),
                )

    def search_services(self, query: str, *, top: bool = False) -> List[SearchServiceResult]:
        normalized_query = normalize_name(query)
        if not normalized_query:
            return []
        sql = """
            SELECT ps.service_id, s.name, ps.duration_minutes, ps.price, ps.is_available,
                   ps.provider_id, p.name AS provider_name
            FROM provider_services ps
            JOIN services s ON s.id = ps.service_id
            JOIN providers p ON p.id = ps.provider_id
            WHERE instr(s.normalized_name, ?) > 0
        """
        params: List[Any] = [normalized_query]
        if top:
            sql += " AND ps.is_available = 1"
        sql += " ORDER BY s.name, p.name"
        if top:
            sql += " LIMIT ?"
            params.append(TOP_SEARCH_LIMIT)
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(sql, tuple(params)).fetchall()
        return [
            SearchServiceResult(
                service_id=row["service_id"],
                name=row["name"],
                duration_minutes=row["duration_minutes"],
                price=row["price"],
                is_available=bool(row["is_available"]),
                provider_id=row["provider_id"],
                provider_name=row["provider_name"],
            )
            for row in rows
        ]

    # Appointments

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute("SELECT * FROM appointments WHERE id = ?", (appointment_id,)).fetchone()
        return self._row_to_appointment(row) if row else None

    def get_appointment_view(self, appointment_id: int) -> AppointmentView:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute(
                    f"{self._appointment_view_select()} WHERE a.id = ?",
                    (appointment_id,),
                ).fetchone()
        if not row:
            raise NotFoundError("Appointment not found")
        return self._row_to_appointment_view(row)

    def list_appointment_views(self, *, user_id: str, role: str = "customer") -> List[AppointmentView]:
        normalized_role = role.strip().lower()
        if normalized_role == "customer":
            where = "WHERE a.customer_id = ?"
        elif normalized_role == "provider":
            where = "WHERE p.owner_id = ?"
        else:
            raise SchedulingValidationError("Invalid role value. Allowed: customer, provider")
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(
                    f"{self._appointment_view_select()} {where} ORDER BY a.start_time",
                    (user_id,),
                ).fetchall()
        return [self._row_to_appointment_view(row) for row in rows]

    def set_appointment_status(self, appointment_id: int, from_status: str, to_status: str) -> bool:
        """Compare-and-set the status; False when the appointment moved on concurrently."""
        with self._lock:
            with self._connect() as conn:
                cursor = conn.execute(
                    "UPDATE appointments SET status = ? WHERE id = ? AND status = ?",
                    (to_status, appointment_id, from_status),
                )
                return cursor.rowcount == 1

    def delete_appointment(self, appointment_id: int) -> bool:
        with self._lock:
            with self._connect() as conn:
                cursor = conn.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))
                return cursor.rowcount == 1

    # Row helpers

    def _require_provider_row(self, conn: sqlite3.Connection, provider_id: int) -> sqlite3.Row:
        row = conn.execute("SELECT * FROM providers WHERE id = ?", (provider_id,)).fetchone()
        if not row:
            raise NotFoundError("Service provider not found")
        return row

    def _assert_owner(self, conn: sqlite3.Connection, provider_id: int, actor_user_id: str) -> None:
        row = self._require_provider_row(conn, provider_id)
        if row["owner_id"] != actor_user_id:
            raise PermissionDeniedError("Only the provider owner can manage this provider")

    def _write_business_hours(
        self,
        conn: sqlite3.Connection,
        provider_id: int,
        business_hours: List[BusinessHours],
    ) -> None:
        conn.executemany(
            """
            INSERT INTO business_hours (provider_id, day_of_week, open_time, close_time, is_open)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    provider_id,
                    hours.day_of_week,
                    hours.open_time.strftime("%H:%M:%S"),
                    hours.close_time.strftime("%H:%M:%S"),
                    1 if hours.is_open else 0,
                )
                for hours in business_hours
            ],
        )

    def _load_business_hours(self, conn: sqlite3.Connection, provider_id: int) -> List[BusinessHours]:
        rows = conn.execute(
            """
            SELECT day_of_week, open_time, close_time, is_open
            FROM business_hours WHERE provider_id = ?
            ORDER BY day_of_week
            """,
            (provider_id,),
        ).fetchall()
        return [self._row_to_business_hours(row) for row in rows]

    def _resolve_catalog_service(self, conn: sqlite3.Connection, name: str) -> int:
        """Returns the catalog id for ``name`` (case-insensitive), creating the entry if needed."""
        row = conn.execute("SELECT id FROM services WHERE lower(name) = lower(?)", (name,)).fetchone()
        if row:
            return int(row["id"])
        cursor = conn.execute(
            "INSERT INTO services (name, normalized_name) VALUES (?, ?)",
            (name, normalize_name(name)),
        )
        return int(cursor.lastrowid)

    def _drop_unused_catalog_service(self, conn: sqlite3.Connection, service_id: int) -> None:
        conn.execute(
            """
            DELETE FROM services
            WHERE id = ?
              AND NOT EXISTS (SELECT 1 FROM provider_services WHERE service_id = ?)
              AND NOT EXISTS (SELECT 1 FROM appointments WHERE service_id = ?)
            """,
            (service_id, service_id, service_id),
        )

    def _offering_row(self, conn: sqlite3.Connection, provider_id: int, service_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            """
            SELECT ps.*, s.name FROM provider_services ps
            JOIN services s ON s.id = ps.service_id
            WHERE ps.provider_id = ? AND ps.service_id = ?
            """,
            (provider_id, service_id),
        ).fetchone()

    def _load_offerings(self, conn: sqlite3.Connection, provider_id: int) -> List[Offering]:
        rows = conn.execute(
            """
            SELECT ps.*, s.name FROM provider_services ps
            JOIN services s ON s.id = ps.service_id
            WHERE ps.provider_id = ?
            ORDER BY s.name
            """,
            (provider_id,),
        ).fetchall()
        return [self._row_to_offering(row) for row in rows]

    def _load_provider_details(self, conn: sqlite3.Connection, provider_id: int) -> ServiceProviderDetails:
        row = self._require_provider_row(conn, provider_id)
        return ServiceProviderDetails(
            provider=self._row_to_provider(row),
            business_hours=self._load_business_hours(conn, provider_id),
            services=self._load_offerings(conn, provider_id),
        )

    def _appointment_view_select(self) -> str:
        return """
            SELECT a.*, s.name AS service_name, p.name AS provider_name
            FROM appointments a
            JOIN providers p ON p.id = a.provider_id
            JOIN services s ON s.id = a.service_id
        """

    def _row_to_provider(self, row: sqlite3.Row) -> ServiceProvider:
        return ServiceProvider(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            description=row["description"],
            phone_number=row["phone_number"],
            location=Location(address=row["address"], city=row["city"], zip_code=row["zip_code"]),
        )

    def _row_to_business_hours(self, row: sqlite3.Row) -> BusinessHours:
        return BusinessHours(
            day_of_week=row["day_of_week"],
            open_time=time.fromisoformat(row["open_time"]),
            close_time=time.fromisoformat(row["close_time"]),
            is_open=bool(row["is_open"]),
        )

    def _row_to_offering(self, row: sqlite3.Row) -> Offering:
        return Offering(
            provider_id=row["provider_id"],
            service_id=row["service_id"],
            name=row["name"],
            description=row["description"],
            duration_minutes=row["duration_minutes"],
            price=row["price"],
            is_available=bool(row["is_available"]),
        )

    def _row_to_appointment(self, row: sqlite3.Row) -> Appointment:
        return Appointment(
            id=row["id"],
            provider_id=row["provider_id"],
            service_id=row["service_id"],
            customer_id=row["customer_id"],
            start_time=parse_timestamp(row["start_time"]),
            end_time=parse_timestamp(row["end_time"]),
            status=row["status"],
            notes=row["notes"],
        )

    def _row_to_appointment_view(self, row: sqlite3.Row) -> AppointmentView:
        return AppointmentView(
            **self._row_to_appointment(row).model_dump(),
            service_name=row["service_name"],
            provider_name=row["provider_name"],
        )


schedule_store = ScheduleStore(db_path=config.DB_PATH)
