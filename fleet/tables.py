# fleet/tables.py
"""
Generic paginated, filterable table used for every entity screen.

A screen holds the complete collection returned by the API; searching, paging
and column visibility are all done here, after the fetch. The search always
runs over the full collection and paging is applied to the filtered result.
"""
import math
from datetime import datetime

from fleet.timeutil import utc_to_local_display

PAGE_SIZE = 12


class Column:
    def __init__(self, name, title=None, render=None):
        self.name = name
        self.title = title or name
        self.render = render

    def cell(self, row, tz):
        if self.render is not None:
            return self.render(row, tz)
        value = row.get(self.name)
        return "" if value is None else str(value)


class TableLayout:
    def __init__(self, entity, key, noun, columns, search_fields):
        self.entity = entity
        self.key = key
        self.noun = noun
        self.columns = columns
        self.search_fields = search_fields

    def matches(self, row, term):
        needle = term.lower()
        for field in self.search_fields:
            value = row.get(field)
            if value is not None and needle in str(value).lower():
                return True
        return False


def local_time(field, missing=""):
    def render(row, tz):
        value = row.get(field)
        return utc_to_local_display(value, tz) if value else missing
    return render


def or_missing(field, missing):
    def render(row, tz):
        value = row.get(field)
        return missing if value in (None, "") else str(value)
    return render


def full_name(first, last):
    def render(row, tz):
        return " ".join(p for p in (row.get(first), row.get(last)) if p)
    return render


def money(field):
    def render(row, tz):
        value = row.get(field)
        return "" if value is None else f"${float(value):.2f}"
    return render


TABLES = {
    "stations": TableLayout(
        "stations", "StationID", "station",
        [Column("StationID", "ID"), Column("StationName", "Name"),
         Column("Latitude"), Column("Longitude"), Column("Capacity"),
         Column("CurrentStock", "Stock")],
        ["StationName", "StationID"],
    ),
    "umbrellas": TableLayout(
        "umbrellas", "UmbrellaID", "umbrella",
        [Column("UmbrellaID", "ID"), Column("Size"), Column("Color"),
         Column("CurrentStationID", "Station ID"),
         Column("CurrentStationName", "Station", or_missing("CurrentStationName", "In use"))],
        ["Color", "UmbrellaID", "CurrentStationName"],
    ),
    "accounts": TableLayout(
        "accounts", "AccountID", "account",
        [Column("AccountID", "ID"), Column("FirstName", "First name"),
         Column("LastName", "Last name"), Column("Email"),
         Column("DateOfBirth", "Birth date"), Column("Phone"),
         Column("Street"), Column("City"), Column("Province"),
         Column("ZIPCode", "ZIP"), Column("CardID", "Card ID")],
        ["FirstName", "LastName", "AccountID", "CardID"],
    ),
    "payments": TableLayout(
        "payments", "CardID", "payment method",
        [Column("CardID", "ID"), Column("CardNumber", "Card number"),
         Column("CardName", "Holder"), Column("ExpireDate", "Expires")],
        ["CardID", "CardName", "CardNumber"],
    ),
    "maintainers": TableLayout(
        "maintainers", "MaintainerID", "maintainer",
        [Column("MaintainerID", "ID"), Column("FirstName", "First name"),
         Column("LastName", "Last name"), Column("Phone"), Column("Email"),
         Column("City"), Column("Province"), Column("Salary")],
        ["FirstName", "LastName", "MaintainerID"],
    ),
    "maintenance-histories": TableLayout(
        "maintenance-histories", "MaintenanceHistoryID", "maintenance history",
        [Column("MaintenanceHistoryID", "ID"),
         Column("MaintenanceTime", "Time", local_time("MaintenanceTime")),
         Column("MaintainerName", "Maintainer",
                full_name("MaintainerName", "MaintainerLastName")),
         Column("StationName", "Station"), Column("Report")],
        ["MaintenanceHistoryID", "MaintainerName", "StationName", "Report"],
    ),
    "rental-histories": TableLayout(
        "rental-histories", "RentalHistoryID", "rental history",
        [Column("RentalHistoryID", "ID"),
         Column("FirstName", "Customer", full_name("FirstName", "LastName")),
         Column("StartStationName", "From"),
         Column("DestinationStationName", "To",
                or_missing("DestinationStationName", "Not returned")),
         Column("UmbrellaID", "Umbrella"),
         Column("StartRentalTime", "Start", local_time("StartRentalTime")),
         Column("EndRentalTime", "End", local_time("EndRentalTime", "Active")),
         Column("Price", render=money("Price"))],
        ["FirstName", "LastName", "StartStationName", "DestinationStationName",
         "UmbrellaID"],
    ),
}


class TableView:
    """Search, page and column state for one entity collection."""

    def __init__(self, layout, rows=(), page_size=PAGE_SIZE, tz=None):
        self.layout = layout
        self.page_size = page_size
        self.tz = tz or datetime.now().astimezone().tzinfo
        self.rows = list(rows)
        self.search = ""
        self.page = 1
        # session only, never persisted
        self.hidden = set()

    def set_rows(self, rows):
        self.rows = list(rows)
        self.page = min(self.page, self.total_pages)

    def set_search(self, term):
        self.search = term or ""
        self.page = 1

    def filtered_rows(self):
        if not self.search:
            return list(self.rows)
        return [r for r in self.rows if self.layout.matches(r, self.search)]

    @property
    def total_pages(self):
        return max(1, math.ceil(len(self.filtered_rows()) / self.page_size))

    def go_to(self, page):
        self.page = max(1, min(int(page), self.total_pages))

    def next_page(self):
        self.go_to(self.page + 1)

    def prev_page(self):
        self.go_to(self.page - 1)

    def page_rows(self):
        start = (self.page - 1) * self.page_size
        return self.filtered_rows()[start:start + self.page_size]

    def toggle_column(self, name):
        if name not in {c.name for c in self.layout.columns}:
            raise KeyError(name)
        self.hidden ^= {name}

    @property
    def visible_columns(self):
        return [c for c in self.layout.columns if c.name not in self.hidden]

    def summary(self):
        total = len(self.filtered_rows())
        first = (self.page - 1) * self.page_size + 1 if total else 0
        last = min(self.page * self.page_size, total)
        return f"Showing {first} to {last} of {total} entries"

    def cells(self):
        """Header row followed by one row of rendered cells per visible record."""
        columns = self.visible_columns
        lines = [[c.title for c in columns]]
        for row in self.page_rows():
            lines.append([c.cell(row, self.tz) for c in columns])
        return lines

    def render_text(self):
        lines = self.cells()
        widths = [max(len(line[i]) for line in lines) for i in range(len(lines[0]))]
        out = ["  ".join(cell.ljust(w) for cell, w in zip(line, widths)).rstrip()
               for line in lines]
        out.append(f"{self.summary()}  (page {self.page} of {self.total_pages})")
        return "\n".join(out)


class EntityScreen:
    """A table bound to the API: full re-fetch on load and after every delete."""

    def __init__(self, client, layout, page_size=PAGE_SIZE, tz=None):
        self.client = client
        self.layout = layout
        self.view = TableView(layout, page_size=page_size, tz=tz)

    def refresh(self):
        self.view.set_rows(self.client.list(self.layout.entity))
        return self.view

    def delete(self, entity_id, confirm):
        """Delete one row after ``confirm(prompt)`` agrees, then reload the list."""
        if not confirm(f"Are you sure you want to delete selected {self.layout.noun}?"):
            return False
        self.client.delete(self.layout.entity, entity_id)
        self.refresh()
        return True
