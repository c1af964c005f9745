# fleet/models.py
from app_factory import db

UMBRELLA_SIZES = ("Small", "Medium", "Large")


class Station(db.Model):
    __tablename__ = "Stations"

    id = db.Column("StationID", db.Integer, primary_key=True)
    name = db.Column("StationName", db.String(150), nullable=False)
    latitude = db.Column("Latitude", db.Float, nullable=False)
    longitude = db.Column("Longitude", db.Float, nullable=False)
    capacity = db.Column("Capacity", db.Integer, nullable=False)

    # CurrentStock is never stored, see StationQueries


class Umbrella(db.Model):
    __tablename__ = "Umbrellas"

    id = db.Column("UmbrellaID", db.Integer, primary_key=True)
    size = db.Column("Size", db.Enum(*UMBRELLA_SIZES, name="umbrella_size",
                                     create_constraint=True), nullable=False)
    color = db.Column("Color", db.String(50), nullable=False)
    # NULL = not docked / in use
    current_station_id = db.Column(
        "CurrentStationID", db.Integer,
        db.ForeignKey("Stations.StationID", ondelete="SET NULL"), nullable=True)


class PaymentMethod(db.Model):
    __tablename__ = "PaymentMethods"

    id = db.Column("CardID", db.Integer, primary_key=True)
    card_number = db.Column("CardNumber", db.String(32), nullable=False)
    card_name = db.Column("CardName", db.String(150), nullable=False)
    cvv = db.Column("CVV", db.String(4), nullable=False)
    expire_date = db.Column("ExpireDate", db.Date, nullable=False)


class Account(db.Model):
    __tablename__ = "Accounts"

    id = db.Column("AccountID", db.Integer, primary_key=True)
    first_name = db.Column("FirstName", db.String(80), nullable=False)
    last_name = db.Column("LastName", db.String(80), nullable=False)
    email = db.Column("Email", db.String(120), nullable=False)
    date_of_birth = db.Column("DateOfBirth", db.Date, nullable=False)
    phone = db.Column("Phone", db.String(20), nullable=False)
    street = db.Column("Street", db.String(200), nullable=False)
    city = db.Column("City", db.String(100), nullable=False)
    province = db.Column("Province", db.String(100), nullable=False)
    zip_code = db.Column("ZIPCode", db.String(20), nullable=False)
    card_id = db.Column(
        "CardID", db.Integer,
        db.ForeignKey("PaymentMethods.CardID", ondelete="SET NULL"), nullable=True)


class Maintainer(db.Model):
    __tablename__ = "Maintainers"

    id = db.Column("MaintainerID", db.Integer, primary_key=True)
    first_name = db.Column("FirstName", db.String(80), nullable=False)
    last_name = db.Column("LastName", db.String(80), nullable=False)
    phone = db.Column("Phone", db.String(20), nullable=False)
    email = db.Column("Email", db.String(120), nullable=False)
    date_of_birth = db.Column("DateOfBirth", db.Date, nullable=False)
    street = db.Column("Street", db.String(200), nullable=False)
    city = db.Column("City", db.String(100), nullable=False)
    province = db.Column("Province", db.String(100), nullable=False)
    zip_code = db.Column("ZIPCode", db.String(20), nullable=False)
    salary = db.Column("Salary", db.Float, nullable=False)


class MaintenanceHistory(db.Model):
    __tablename__ = "MaintenanceHistories"

    id = db.Column("MaintenanceHistoryID", db.Integer, primary_key=True)
    maintenance_time = db.Column("MaintenanceTime", db.DateTime, nullable=False)  # UTC
    maintainer_id = db.Column(
        "MaintainerID", db.Integer,
        db.ForeignKey("Maintainers.MaintainerID", ondelete="RESTRICT"), nullable=False)
    station_id = db.Column(
        "StationID", db.Integer,
        db.ForeignKey("Stations.StationID", ondelete="RESTRICT"), nullable=False)
    report = db.Column("Report", db.Text, nullable=False)


class RentalHistory(db.Model):
    __tablename__ = "RentalHistories"

    id = db.Column("RentalHistoryID", db.Integer, primary_key=True)
    account_id = db.Column(
        "AccountID", db.Integer,
        db.ForeignKey("Accounts.AccountID", ondelete="RESTRICT"), nullable=False)
    umbrella_id = db.Column(
        "UmbrellaID", db.Integer,
        db.ForeignKey("Umbrellas.UmbrellaID", ondelete="RESTRICT"), nullable=False)
    card_id = db.Column(
        "CardID", db.Integer,
        db.ForeignKey("PaymentMethods.CardID", ondelete="SET NULL"), nullable=True)
    start_station_id = db.Column(
        "StartStationID", db.Integer,
        db.ForeignKey("Stations.StationID", ondelete="RESTRICT"), nullable=False)
    # NULL = not returned yet
    destination_station_id = db.Column(
        "DestinationStationID", db.Integer,
        db.ForeignKey("Stations.StationID", ondelete="RESTRICT"), nullable=True)
    start_rental_time = db.Column("StartRentalTime", db.DateTime, nullable=False)  # UTC
    # NULL = rental still active
    end_rental_time = db.Column("EndRentalTime", db.DateTime, nullable=True)
    price = db.Column("Price", db.Float, nullable=False, default=0.0)
