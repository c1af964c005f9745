# fleet/cli.py
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import click
from flask import current_app

from fleet.client import ApiError, FleetClient
from fleet.forms import FORMS, EntityForm, FormError, FormLoadError
from fleet.mapview import MapView
from fleet.tables import TABLES, EntityScreen

ENTITY = click.Choice(sorted(TABLES))


def _client():
    return FleetClient(current_app.config["FLEET_API_URL"])


def _tz(name):
    return ZoneInfo(name) if name else None


def _pairs(assignments):
    changes = {}
    for item in assignments:
        if "=" not in item:
            raise click.BadParameter(f"expected FIELD=VALUE, got {item!r}")
        name, value = item.split("=", 1)
        changes[name.strip()] = value
    return changes


def _show(entity, tz=None):
    screen = EntityScreen(_client(), TABLES[entity],
                          page_size=current_app.config["PAGE_SIZE"], tz=tz)
    try:
        click.echo(screen.refresh().render_text())
    except ApiError as e:
        raise click.ClickException(str(e))


def seed(store):
    """Insert a small demo network through the access layer."""
    central = store.stations.create({"StationName": "Central", "Latitude": 18.7883,
                                     "Longitude": 98.9853, "Capacity": 10})
    campus = store.stations.create({"StationName": "Campus Gate", "Latitude": 18.8037,
                                    "Longitude": 98.9524, "Capacity": 8})
    market = store.stations.create({"StationName": "Night Market", "Latitude": 18.7851,
                                    "Longitude": 99.0006, "Capacity": 12})

    umbrellas = [
        store.umbrellas.create({"Size": "Small", "Color": "Red", "CurrentStationID": central}),
        store.umbrellas.create({"Size": "Medium", "Color": "Blue", "CurrentStationID": central}),
        store.umbrellas.create({"Size": "Large", "Color": "Green", "CurrentStationID": campus}),
        store.umbrellas.create({"Size": "Medium", "Color": "Yellow", "CurrentStationID": None}),
    ]

    card = store.payments.create({"CardNumber": "4111111111111111", "CardName": "Somchai Jaidee",
                                  "CVV": "123", "ExpireDate": date(2028, 12, 31)})
    account = store.accounts.create({
        "FirstName": "Somchai", "LastName": "Jaidee", "Email": "somchai@example.com",
        "DateOfBirth": date(1995, 4, 2), "Phone": "0812345678", "Street": "12 Huay Kaew Rd",
        "City": "Chiang Mai", "Province": "Chiang Mai", "ZIPCode": "50200", "CardID": card,
    })
    maintainer = store.maintainers.create({
        "FirstName": "Malee", "LastName": "Srisuk", "Phone": "0898765432",
        "Email": "malee@example.com", "DateOfBirth": date(1988, 9, 15),
        "Street": "3 Nimman Rd", "City": "Chiang Mai", "Province": "Chiang Mai",
        "ZIPCode": "50200", "Salary": 18000.0,
    })

    now = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
    store.maintenance_histories.create({
        "MaintenanceTime": now - timedelta(days=2), "MaintainerID": maintainer,
        "StationID": market, "Report": "Replaced the dock lock.",
    })
    store.rental_histories.create({
        "AccountID": account, "UmbrellaID": umbrellas[2], "CardID": card,
        "StartStationID": market, "DestinationStationID": campus,
        "StartRentalTime": now - timedelta(days=1, hours=2),
        "EndRentalTime": now - timedelta(days=1), "Price": 20.0,
    })
    store.rental_histories.create({
        "AccountID": account, "UmbrellaID": umbrellas[3], "CardID": card,
        "StartStationID": central, "DestinationStationID": None,
        "StartRentalTime": now - timedelta(minutes=30), "EndRentalTime": None,
        "Price": 0.0,
    })


def register_commands(app):

    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        from app_factory import db
        from fleet import models  # noqa: F401
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-db")
    def seed_db_command():
        """Add demo stations, umbrellas, people and rentals."""
        from app_factory import db
        from fleet.queries import Store
        seed(Store(db.session))
        click.echo("Database seeded with demo data.")

    @app.cli.command("table")
    @click.argument("entity", type=ENTITY)
    @click.option("--search", default="", help="Case-insensitive filter.")
    @click.option("--page", default=1, show_default=True)
    @click.option("--hide", multiple=True, help="Column to hide (repeatable).")
    @click.option("--tz", default=None, help="IANA zone for times, default local.")
    def table_command(entity, search, page, hide, tz):
        """Show one page of an entity table."""
        screen = EntityScreen(_client(), TABLES[entity],
                              page_size=app.config["PAGE_SIZE"], tz=_tz(tz))
        try:
            view = screen.refresh()
            view.set_search(search)
            view.go_to(page)
            for name in hide:
                view.toggle_column(name)
        except ApiError as e:
            raise click.ClickException(str(e))
        except KeyError as e:
            raise click.BadParameter(f"unknown column {e}")
        click.echo(view.render_text())

    @app.cli.command("map")
    def map_command():
        """Print station markers and rental heat points."""
        view = MapView(_client()).refresh()
        click.echo(view.render_text())
        if view.errors:
            raise click.ClickException("; ".join(view.errors))

    @app.cli.command("remove")
    @click.argument("entity", type=ENTITY)
    @click.argument("entity_id", type=int)
    @click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
    def remove_command(entity, entity_id, yes):
        """Delete one row, then show the reloaded table."""
        screen = EntityScreen(_client(), TABLES[entity], page_size=app.config["PAGE_SIZE"])
        confirm = (lambda prompt: True) if yes else click.confirm
        try:
            if not screen.delete(entity_id, confirm):
                click.echo("Cancelled.")
                return
        except ApiError as e:
            raise click.ClickException(str(e))
        click.echo(screen.view.render_text())

    @app.cli.command("new")
    @click.argument("entity", type=ENTITY)
    @click.argument("assignments", nargs=-1)
    @click.option("--tz", default=None, help="IANA zone the given times are in.")
    def new_command(entity, assignments, tz):
        """Create a row from FIELD=VALUE pairs."""
        form = EntityForm(_client(), FORMS[entity], tz=_tz(tz))
        try:
            result = form.load().submit(_pairs(assignments))
        except (ApiError, FormError, FormLoadError) as e:
            raise click.ClickException(str(e))
        click.echo(f"Created: {result}")
        _show(entity, _tz(tz))

    @app.cli.command("edit")
    @click.argument("entity", type=ENTITY)
    @click.argument("entity_id", type=int)
    @click.argument("assignments", nargs=-1)
    @click.option("--tz", default=None, help="IANA zone the given times are in.")
    def edit_command(entity, entity_id, assignments, tz):
        """Overwrite a row; fields not given keep their current values."""
        try:
            form = EntityForm(_client(), FORMS[entity], entity_id=entity_id, tz=_tz(tz))
            result = form.load().submit(_pairs(assignments))
        except (ApiError, FormError, FormLoadError) as e:
            raise click.ClickException(str(e))
        click.echo(f"Updated: {result}")
        _show(entity, _tz(tz))
