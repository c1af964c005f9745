# fleet/forms.py
"""
Create and edit forms for the fleet entities.

A form first loads every reference list it offers as a choice (stations for an
umbrella, accounts/umbrellas/stations/cards for a rental, ...). If any of them
fails the whole form is unusable: one ``FormLoadError`` is raised and nothing
can be submitted. Edit forms fetch the record, convert its UTC timestamps to
local input values, and only then expose it for editing. Submitting converts
local times back to UTC and sends the full field set.
"""
from datetime import datetime

from fleet.client import ApiError
from fleet.timeutil import local_input_to_utc, utc_to_local_input


class FormLoadError(Exception):
    pass


class FormError(Exception):
    pass


class FormLayout:
    """
    ``fields`` maps field name to kind: ``text``, ``int``, ``float``, ``date``
    (``YYYY-MM-DD``) or ``datetime`` (local ``YYYY-MM-DDTHH:MM``).
    ``references`` maps a foreign-key field to ``(list name, key in that list)``;
    ``optional`` names the fields that may be left blank.
    """

    def __init__(self, entity, fields, references=None, optional=(), editable=True):
        self.entity = entity
        self.fields = fields
        self.references = references or {}
        self.optional = set(optional)
        self.editable = editable


REFERENCE_LOADERS = {
    "stations": lambda client: client.list("stations"),
    "umbrellas": lambda client: client.list("umbrellas"),
    "accounts": lambda client: client.list("accounts"),
    "maintainers": lambda client: client.list("maintainers"),
    "cardIDs": lambda client: client.card_ids(),
}

_ADDRESS = {"Street": "text", "City": "text", "Province": "text", "ZIPCode": "text"}

FORMS = {
    "stations": FormLayout("stations", {
        "StationName": "text", "Latitude": "float", "Longitude": "float",
        "Capacity": "int",
    }),
    "umbrellas": FormLayout(
        "umbrellas",
        {"Size": "text", "Color": "text", "CurrentStationID": "int"},
        references={"CurrentStationID": ("stations", "StationID")},
        optional=["CurrentStationID"],
    ),
    "accounts": FormLayout(
        "accounts",
        {"FirstName": "text", "LastName": "text", "Email": "text",
         "DateOfBirth": "date", "Phone": "text", **_ADDRESS, "CardID": "int"},
        references={"CardID": ("cardIDs", None)},
        optional=["CardID"],
    ),
    "payments": FormLayout(
        "payments",
        {"CardNumber": "text", "CardName": "text", "CVV": "text", "ExpireDate": "date"},
        editable=False,
    ),
    "maintainers": FormLayout(
        "maintainers",
        {"FirstName": "text", "LastName": "text", "Phone": "text", "Email": "text",
         "DateOfBirth": "date", **_ADDRESS, "Salary": "float"},
    ),
    "maintenance-histories": FormLayout(
        "maintenance-histories",
        {"MaintenanceTime": "datetime", "MaintainerID": "int", "StationID": "int",
         "Report": "text"},
        references={"MaintainerID": ("maintainers", "MaintainerID"),
                    "StationID": ("stations", "StationID")},
    ),
    "rental-histories": FormLayout(
        "rental-histories",
        {"AccountID": "int", "UmbrellaID": "int", "CardID": "int",
         "StartStationID": "int", "DestinationStationID": "int",
         "StartRentalTime": "datetime", "EndRentalTime": "datetime",
         "Price": "float"},
        references={"AccountID": ("accounts", "AccountID"),
                    "UmbrellaID": ("umbrellas", "UmbrellaID"),
                    "CardID": ("cardIDs", None),
                    "StartStationID": ("stations", "StationID"),
                    "DestinationStationID": ("stations", "StationID")},
        optional=["CardID", "DestinationStationID", "EndRentalTime", "Price"],
    ),
}


class EntityForm:
    """One create (``entity_id=None``) or edit form."""

    def __init__(self, client, layout, entity_id=None, tz=None):
        if entity_id is not None and not layout.editable:
            raise FormError(f"{layout.entity} cannot be edited")
        self.client = client
        self.layout = layout
        self.entity_id = entity_id
        self.tz = tz or datetime.now().astimezone().tzinfo
        self.choices = {}
        self.values = {}
        self.loaded = False

    def load(self):
        lists = {name for name, _ in self.layout.references.values()}
        try:
            choices = {name: REFERENCE_LOADERS[name](self.client) for name in sorted(lists)}
            record = None
            if self.entity_id is not None:
                record = self.client.get(self.layout.entity, self.entity_id)
        except ApiError as e:
            raise FormLoadError(f"Failed to load {self.layout.entity} form: {e}") from e

        self.choices = choices
        self.values = self._to_inputs(record) if record else {}
        self.loaded = True
        return self

    def _to_inputs(self, record):
        values = {}
        for name, kind in self.layout.fields.items():
            value = record.get(name)
            if kind == "datetime":
                value = utc_to_local_input(value, self.tz)
            values[name] = "" if value is None else value
        return values

    def options(self, field):
        list_name, key = self.layout.references[field]
        items = self.choices.get(list_name, [])
        return [item if key is None else item[key] for item in items]

    def _coerce(self, name, raw):
        kind = self.layout.fields[name]
        if raw in (None, ""):
            if name not in self.layout.optional:
                raise FormError(f"{name} is required")
            return None
        if kind == "int":
            return int(raw)
        if kind == "float":
            return float(raw)
        if kind == "datetime":
            return local_input_to_utc(str(raw), self.tz)
        return str(raw)

    def build_payload(self, changes):
        values = {**self.values, **(changes or {})}
        unknown = set(values) - set(self.layout.fields)
        if unknown:
            raise FormError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        payload = {}
        for name in self.layout.fields:
            try:
                payload[name] = self._coerce(name, values.get(name))
            except ValueError as e:
                raise FormError(f"{name}: {e}") from e
            if name in self.layout.references and payload[name] is not None:
                if payload[name] not in self.options(name):
                    raise FormError(f"{name} {payload[name]} is not one of the available choices")
        return payload

    def submit(self, changes=None):
        """Send the form; the caller goes back to the previous view afterwards."""
        if not self.loaded:
            raise FormLoadError("Form is not loaded")
        payload = self.build_payload(changes)
        if self.entity_id is None:
            return self.client.create(self.layout.entity, payload)
        return self.client.update(self.layout.entity, self.entity_id, payload)
