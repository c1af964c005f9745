# fleet/queries.py
"""
Entity access layer.

One query group per entity type. Every group is bound to the session it is given
(``Store(db.session)`` inside a request, any ``Session`` in scripts and tests)
and implements list, get, create, update and delete as single statements.
Rows come back as plain dicts keyed by the store's column names, with joined
display names attached where a screen needs them.

Not-found is a normal outcome: ``get`` returns ``None``, ``update`` and
``delete`` return ``False``. Store failures (``SQLAlchemyError``) propagate to
the caller. Values are written as given; normalising dates and blanks is the
caller's job. Writes to stations and rentals drop the cached heatmap pairs.
"""
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import aliased

from app_factory import cache
from fleet.models import (Account, MaintenanceHistory, Maintainer,
                          PaymentMethod, RentalHistory, Station, Umbrella)
from fleet.timeutil import serialize

logger = logging.getLogger(__name__)

HEATMAP_CACHE_KEY = "heatmap-data"


def _row_to_dict(row):
    return {k: serialize(v) for k, v in row._mapping.items()}


class EntityQueries:
    """CRUD over one table.

    ``fields`` maps each writable column name to its model attribute. Every
    field is written on create and on update (no partial updates); values must
    already be in store form (dates as ``date``/``datetime``).
    """
    model = None
    key = None
    label = None
    fields = {}
    # cache entries built from this table, dropped after every write
    invalidates = ()

    def __init__(self, session):
        self.session = session

    def _columns(self):
        cols = [self.model.id.label(self.key)]
        for name, attr in self.fields.items():
            cols.append(getattr(self.model, attr).label(name))
        return cols

    def _select(self):
        return select(*self._columns())

    def _written(self):
        for key in self.invalidates:
            cache.delete(key)

    def _values(self, data):
        return {attr: data.get(name) for name, attr in self.fields.items()}

    def list(self):
        rows = self.session.execute(self._select().order_by(self.model.id))
        return [_row_to_dict(r) for r in rows]

    def get(self, entity_id):
        row = self.session.execute(
            self._select().where(self.model.id == entity_id)
        ).first()
        return _row_to_dict(row) if row else None

    def create(self, data):
        obj = self.model(**self._values(data))
        self.session.add(obj)
        self.session.commit()
        self._written()
        logger.info("%s created with ID: %s", self.label, obj.id)
        return obj.id

    def update(self, entity_id, data):
        result = self.session.execute(
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**self._values(data))
        )
        self.session.commit()
        self._written()
        return result.rowcount > 0

    def delete(self, entity_id):
        result = self.session.execute(
            delete(self.model).where(self.model.id == entity_id)
        )
        self.session.commit()
        self._written()
        return result.rowcount > 0


class StationQueries(EntityQueries):
    model = Station
    key = "StationID"
    label = "Station"
    invalidates = (HEATMAP_CACHE_KEY,)
    fields = {
        "StationName": "name",
        "Latitude": "latitude",
        "Longitude": "longitude",
        "Capacity": "capacity",
    }

    def _select(self):
        # CurrentStock = umbrellas docked here, recomputed on every read
        return (
            select(*self._columns(), func.count(Umbrella.id).label("CurrentStock"))
            .outerjoin(Umbrella, Umbrella.current_station_id == Station.id)
            .group_by(Station.id, Station.name, Station.latitude,
                      Station.longitude, Station.capacity)
        )


class UmbrellaQueries(EntityQueries):
    model = Umbrella
    key = "UmbrellaID"
    label = "Umbrella"
    fields = {
        "Size": "size",
        "Color": "color",
        "CurrentStationID": "current_station_id",
    }

    def _select(self):
        return (
            select(*self._columns(), Station.name.label("CurrentStationName"))
            .outerjoin(Station, Umbrella.current_station_id == Station.id)
        )


class PaymentQueries(EntityQueries):
    model = PaymentMethod
    key = "CardID"
    label = "Payment method"
    fields = {
        "CardNumber": "card_number",
        "CardName": "card_name",
        "CVV": "cvv",
        "ExpireDate": "expire_date",
    }

    def ids(self):
        return list(self.session.scalars(
            select(PaymentMethod.id).order_by(PaymentMethod.id)))


class AccountQueries(EntityQueries):
    model = Account
    key = "AccountID"
    label = "Account"
    fields = {
        "FirstName": "first_name",
        "LastName": "last_name",
        "Email": "email",
        "DateOfBirth": "date_of_birth",
        "Phone": "phone",
        "Street": "street",
        "City": "city",
        "Province": "province",
        "ZIPCode": "zip_code",
        "CardID": "card_id",
    }


class MaintainerQueries(EntityQueries):
    model = Maintainer
    key = "MaintainerID"
    label = "Maintainer"
    fields = {
        "FirstName": "first_name",
        "LastName": "last_name",
        "Phone": "phone",
        "Email": "email",
        "DateOfBirth": "date_of_birth",
        "Street": "street",
        "City": "city",
        "Province": "province",
        "ZIPCode": "zip_code",
        "Salary": "salary",
    }


class MaintenanceHistoryQueries(EntityQueries):
    model = MaintenanceHistory
    key = "MaintenanceHistoryID"
    label = "Maintenance history"
    fields = {
        "MaintenanceTime": "maintenance_time",
        "MaintainerID": "maintainer_id",
        "StationID": "station_id",
        "Report": "report",
    }

    def _select(self):
        return (
            select(
                *self._columns(),
                Maintainer.first_name.label("MaintainerName"),
                Maintainer.last_name.label("MaintainerLastName"),
                Station.name.label("StationName"),
            )
            .join(Maintainer, MaintenanceHistory.maintainer_id == Maintainer.id)
            .join(Station, MaintenanceHistory.station_id == Station.id)
        )


class RentalHistoryQueries(EntityQueries):
    model = RentalHistory
    key = "RentalHistoryID"
    label = "Rental history"
    invalidates = (HEATMAP_CACHE_KEY,)
    fields = {
        "AccountID": "account_id",
        "UmbrellaID": "umbrella_id",
        "CardID": "card_id",
        "StartStationID": "start_station_id",
        "DestinationStationID": "destination_station_id",
        "StartRentalTime": "start_rental_time",
        "EndRentalTime": "end_rental_time",
        "Price": "price",
    }

    def _values(self, data):
        values = super()._values(data)
        if values["price"] is None:
            values["price"] = 0.0
        return values

    def _select(self):
        start = aliased(Station)
        dest = aliased(Station)
        return (
            select(
                *self._columns(),
                Account.first_name.label("FirstName"),
                Account.last_name.label("LastName"),
                start.name.label("StartStationName"),
                dest.name.label("DestinationStationName"),
            )
            .join(Account, RentalHistory.account_id == Account.id)
            .join(start, RentalHistory.start_station_id == start.id)
            .outerjoin(dest, RentalHistory.destination_station_id == dest.id)
        )

    def get(self, entity_id, destination_join="left"):
        """Fetch one rental with account and station names.

        ``destination_join="inner"`` keeps the legacy detail query, which drops
        rentals that have no destination yet.
        """
        start = aliased(Station)
        dest = aliased(Station)
        stmt = (
            select(
                *self._columns(),
                Account.first_name.label("AccountFirstName"),
                Account.last_name.label("AccountLastName"),
                start.name.label("StartStationName"),
                dest.name.label("EndStationName"),
            )
            .join(Account, RentalHistory.account_id == Account.id)
            .join(start, RentalHistory.start_station_id == start.id)
            .join(dest, RentalHistory.destination_station_id == dest.id,
                  isouter=(destination_join != "inner"))
            .where(RentalHistory.id == entity_id)
        )
        row = self.session.execute(stmt).first()
        if row is None and destination_join == "inner":
            hidden = self.session.execute(
                select(RentalHistory.id).where(
                    RentalHistory.id == entity_id,
                    RentalHistory.destination_station_id.is_(None),
                )
            ).first()
            if hidden:
                logger.warning("Rental history %s exists but has no destination "
                               "and is hidden by the inner join", entity_id)
        return _row_to_dict(row) if row else None

    def heatmap(self):
        """(start, destination) coordinate pairs for returned rentals."""
        start = aliased(Station)
        dest = aliased(Station)
        stmt = (
            select(
                RentalHistory.start_station_id.label("StartStationID"),
                start.latitude.label("StartLatitude"),
                start.longitude.label("StartLongitude"),
                RentalHistory.destination_station_id.label("DestinationStationID"),
                dest.latitude.label("DestinationLatitude"),
                dest.longitude.label("DestinationLongitude"),
            )
            .join(start, RentalHistory.start_station_id == start.id)
            .join(dest, RentalHistory.destination_station_id == dest.id)
            .order_by(RentalHistory.id)
        )
        return [_row_to_dict(r) for r in self.session.execute(stmt)]


class Store:
    """All query groups bound to one session."""

    def __init__(self, session):
        self.session = session
        self.stations = StationQueries(session)
        self.umbrellas = UmbrellaQueries(session)
        self.payments = PaymentQueries(session)
        self.accounts = AccountQueries(session)
        self.maintainers = MaintainerQueries(session)
        self.maintenance_histories = MaintenanceHistoryQueries(session)
        self.rental_histories = RentalHistoryQueries(session)
