import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from app_factory import db, cache
from fleet.queries import HEATMAP_CACHE_KEY, Store
from fleet.timeutil import serialize, to_store_date, to_store_datetime

logger = logging.getLogger(__name__)

bp = Blueprint("fleet_api", __name__)

# --------------------
# HELPERS
# --------------------
def store():
    return Store(db.session)


def store_errors(message):
    """Turn a store failure inside the route into ``500 {"error": message}``."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except (SQLAlchemyError, ValueError, TypeError):
                db.session.rollback()
                logger.exception(message)
                return jsonify({"error": message}), 500
        return wrapper
    return decorator


def read_payload(group, normalizers=None):
    """
    Pull every writable field of ``group`` out of the JSON body.

    Blank strings become None and the listed date fields are normalised to
    their UTC store form. Nothing else is checked here; the store's own
    constraints decide what is acceptable.
    """
    data = request.get_json(silent=True) or {}
    normalizers = normalizers or {}
    payload = {}
    for name in group.fields:
        value = data.get(name)
        if value == "":
            value = None
        if value is not None and name in normalizers:
            value = normalizers[name](value)
        payload[name] = value
    return payload


def echo(payload):
    return {name: serialize(value) for name, value in payload.items()}


def not_found(noun):
    return jsonify({"error": f"{noun} not found"}), 404


def _get_one(group, entity_id, noun):
    row = group.get(entity_id)
    if row is None:
        return not_found(noun)
    return jsonify(row)


def _delete_one(group, entity_id, noun):
    if not group.delete(entity_id):
        return not_found(noun)
    return jsonify({"message": f"{noun} deleted successfully"})


PERSON_DATES = {"DateOfBirth": to_store_date}
PAYMENT_DATES = {"ExpireDate": to_store_date}
MAINTENANCE_DATES = {"MaintenanceTime": to_store_datetime}
RENTAL_DATES = {
    "StartRentalTime": to_store_datetime,
    "EndRentalTime": to_store_datetime,
}


# --------------------
# HEALTH
# --------------------
@bp.route("/test", methods=["GET"])
def test_connection():
    return jsonify({"message": "Database connection is complete."})


# ----------------------------------------------------------
# STATIONS
# ----------------------------------------------------------
@bp.route("/stations", methods=["GET"])
@store_errors("Database query failed")
def list_stations():
    return jsonify(store().stations.list())


@bp.route("/stations/<int:station_id>", methods=["GET"])
@store_errors("Internal server error")
def get_station(station_id):
    return _get_one(store().stations, station_id, "Station")


@bp.route("/stations", methods=["POST"])
@store_errors("Failed to insert new station")
def create_station():
    group = store().stations
    station_id = group.create(read_payload(group))
    return jsonify({"message": "New station added", "id": station_id}), 201


@bp.route("/stations/<int:station_id>", methods=["PUT"])
@store_errors("Error updating station")
def update_station(station_id):
    group = store().stations
    if not group.update(station_id, read_payload(group)):
        return not_found("Station")
    return jsonify({"message": "Station updated successfully"})


@bp.route("/stations/<int:station_id>", methods=["DELETE"])
@store_errors("Error deleting station")
def delete_station(station_id):
    return _delete_one(store().stations, station_id, "Station")


# ----------------------------------------------------------
# UMBRELLAS
# ----------------------------------------------------------
@bp.route("/umbrellas", methods=["GET"])
@store_errors("Failed to fetch umbrellas")
def list_umbrellas():
    return jsonify(store().umbrellas.list())


@bp.route("/umbrellas/<int:umbrella_id>", methods=["GET"])
@store_errors("Failed to fetch umbrella")
def get_umbrella(umbrella_id):
    return _get_one(store().umbrellas, umbrella_id, "Umbrella")


@bp.route("/umbrellas", methods=["POST"])
@store_errors("Failed to insert new umbrella")
def create_umbrella():
    group = store().umbrellas
    payload = read_payload(group)
    umbrella_id = group.create(payload)
    return jsonify({"id": umbrella_id, **echo(payload)}), 201


@bp.route("/umbrellas/<int:umbrella_id>", methods=["PUT"])
@store_errors("Error updating umbrella")
def update_umbrella(umbrella_id):
    group = store().umbrellas
    if not group.update(umbrella_id, read_payload(group)):
        return not_found("Umbrella")
    return jsonify({"message": "Umbrella updated successfully"})


@bp.route("/umbrellas/<int:umbrella_id>", methods=["DELETE"])
@store_errors("Error deleting umbrella")
def delete_umbrella(umbrella_id):
    return _delete_one(store().umbrellas, umbrella_id, "Umbrella")


# ----------------------------------------------------------
# ACCOUNTS
# ----------------------------------------------------------
@bp.route("/accounts", methods=["GET"])
@store_errors("Internal server error")
def list_accounts():
    return jsonify(store().accounts.list())


@bp.route("/accounts/<int:account_id>", methods=["GET"])
@store_errors("Internal server error")
def get_account(account_id):
    return _get_one(store().accounts, account_id, "Account")


@bp.route("/cardIDs", methods=["GET"])
@store_errors("Internal Server Error")
def list_card_ids():
    return jsonify(store().payments.ids())


@bp.route("/accounts", methods=["POST"])
@store_errors("Failed to insert new account")
def create_account():
    group = store().accounts
    account_id = group.create(read_payload(group, PERSON_DATES))
    return jsonify({"message": "New account added", "accountId": account_id}), 201


@bp.route("/accounts/<int:account_id>", methods=["PUT"])
@store_errors("Error updating account")
def update_account(account_id):
    group = store().accounts
    if not group.update(account_id, read_payload(group, PERSON_DATES)):
        return not_found("Account")
    return jsonify({"message": "Account updated successfully"})


@bp.route("/accounts/<int:account_id>", methods=["DELETE"])
@store_errors("Error deleting account")
def delete_account(account_id):
    return _delete_one(store().accounts, account_id, "Account")


# ----------------------------------------------------------
# PAYMENT METHODS (no update route)
# ----------------------------------------------------------
@bp.route("/payments", methods=["GET"])
@store_errors("Internal server error")
def list_payments():
    return jsonify(store().payments.list())


@bp.route("/payments/<int:card_id>", methods=["GET"])
@store_errors("Internal server error")
def get_payment(card_id):
    return _get_one(store().payments, card_id, "Payment method")


@bp.route("/payments", methods=["POST"])
@store_errors("Failed to insert new payment method")
def create_payment():
    group = store().payments
    payload = read_payload(group, PAYMENT_DATES)
    card_id = group.create(payload)
    return jsonify({"CardID": card_id, **echo(payload)}), 201


@bp.route("/payments/<int:card_id>", methods=["DELETE"])
@store_errors("Error deleting payment method")
def delete_payment(card_id):
    return _delete_one(store().payments, card_id, "Payment method")


# ----------------------------------------------------------
# MAINTAINERS
# ----------------------------------------------------------
@bp.route("/maintainers", methods=["GET"])
@store_errors("Internal server error")
def list_maintainers():
    return jsonify(store().maintainers.list())


@bp.route("/maintainers/<int:maintainer_id>", methods=["GET"])
@store_errors("Internal server error")
def get_maintainer(maintainer_id):
    return _get_one(store().maintainers, maintainer_id, "Maintainer")


@bp.route("/maintainers", methods=["POST"])
@store_errors("Failed to insert new maintainer")
def create_maintainer():
    group = store().maintainers
    maintainer_id = group.create(read_payload(group, PERSON_DATES))
    return jsonify({"message": "New maintainer added",
                    "maintainerId": maintainer_id}), 201


@bp.route("/maintainers/<int:maintainer_id>", methods=["PUT"])
@store_errors("Error updating maintainer")
def update_maintainer(maintainer_id):
    group = store().maintainers
    if not group.update(maintainer_id, read_payload(group, PERSON_DATES)):
        return not_found("Maintainer")
    return jsonify({"message": "Maintainer updated successfully"})


@bp.route("/maintainers/<int:maintainer_id>", methods=["DELETE"])
@store_errors("Error deleting maintainer")
def delete_maintainer(maintainer_id):
    return _delete_one(store().maintainers, maintainer_id, "Maintainer")


# ----------------------------------------------------------
# MAINTENANCE HISTORIES
# ----------------------------------------------------------
@bp.route("/maintenance-histories", methods=["GET"])
@store_errors("Failed to fetch maintenance histories")
def list_maintenance_histories():
    return jsonify(store().maintenance_histories.list())


@bp.route("/maintenance-histories/<int:history_id>", methods=["GET"])
@store_errors("Failed to fetch maintenance history")
def get_maintenance_history(history_id):
    return _get_one(store().maintenance_histories, history_id, "Maintenance history")


@bp.route("/maintenance-histories", methods=["POST"])
@store_errors("Failed to insert new maintenance history")
def create_maintenance_history():
    group = store().maintenance_histories
    payload = read_payload(group, MAINTENANCE_DATES)
    history_id = group.create(payload)
    return jsonify({"id": history_id, **echo(payload)}), 201


@bp.route("/maintenance-histories/<int:history_id>", methods=["PUT"])
@store_errors("Error updating maintenance history")
def update_maintenance_history(history_id):
    group = store().maintenance_histories
    payload = read_payload(group, MAINTENANCE_DATES)
    if not group.update(history_id, payload):
        return not_found("Maintenance history")
    return jsonify({"MaintenanceHistoryID": history_id, **echo(payload)})


@bp.route("/maintenance-histories/<int:history_id>", methods=["DELETE"])
@store_errors("Error deleting maintenance history")
def delete_maintenance_history(history_id):
    return _delete_one(store().maintenance_histories, history_id, "Maintenance history")


# ----------------------------------------------------------
# RENTAL HISTORIES
# ----------------------------------------------------------
@bp.route("/rental-histories", methods=["GET"])
@store_errors("Failed to fetch rental histories")
def list_rental_histories():
    return jsonify(store().rental_histories.list())


@bp.route("/rental-histories/<int:rental_id>", methods=["GET"])
@store_errors("Internal server error")
def get_rental_history(rental_id):
    join = current_app.config.get("RENTAL_DETAIL_DESTINATION_JOIN", "left")
    row = store().rental_histories.get(rental_id, destination_join=join)
    if row is None:
        return not_found("Rental history")
    return jsonify(row)


@bp.route("/rental-histories", methods=["POST"])
@store_errors("Failed to insert new rental history")
def create_rental_history():
    group = store().rental_histories
    payload = read_payload(group, RENTAL_DATES)
    rental_id = group.create(payload)
    return jsonify({"id": rental_id, **echo(payload)}), 201


@bp.route("/rental-histories/<int:rental_id>", methods=["PUT"])
@store_errors("Error updating rental history")
def update_rental_history(rental_id):
    group = store().rental_histories
    payload = read_payload(group, RENTAL_DATES)
    if not group.update(rental_id, payload):
        return not_found("Rental history")
    return jsonify({"RentalHistoryID": rental_id, **echo(payload)})


@bp.route("/rental-histories/<int:rental_id>", methods=["DELETE"])
@store_errors("Error deleting rental history")
def delete_rental_history(rental_id):
    return _delete_one(store().rental_histories, rental_id, "Rental history")


# --------------------
# MAP
# --------------------
@bp.route("/heatmap-data", methods=["GET"])
@store_errors("Database query error")
def heatmap_data():
    pairs = cache.get(HEATMAP_CACHE_KEY)
    if pairs is None:
        pairs = store().rental_histories.heatmap()
        cache.set(HEATMAP_CACHE_KEY, pairs,
                  timeout=current_app.config["HEATMAP_CACHE_TIMEOUT"])
    return jsonify(pairs)
