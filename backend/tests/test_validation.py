"""
Tests des contrôles VIN / immatriculation (indications non bloquantes)
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from models import VehicleRecord
from vin_utils import (
    calculate_check_digit,
    validate_vin_checksum,
    correct_vin_ocr_errors,
    suggest_vin_correction,
    is_vin_format,
    describe_vin,
)
from validation import check_vehicle_record, is_plate_format, is_registration_date_format


class TestVINUtils:

    def test_vin_format(self):
        assert is_vin_format("VF1AB12C3D4567890")
        assert is_vin_format("vf1ab12c3d4567890")
        assert is_vin_format("VF1AB-12C3D 4567890")
        assert not is_vin_format("VF1AB12C3D456789")
        assert not is_vin_format("VF1AB12C3D456789O")
        assert not is_vin_format("")

    def test_valid_vin_checksum(self):
        """VIN nord-américain connu (check digit en position 9)"""
        assert validate_vin_checksum("1M8GDM9AXKP042788")
        assert calculate_check_digit("1M8GDM9AXKP042788") == "X"

    def test_invalid_vin_checksum(self):
        assert not validate_vin_checksum("1M8GDM9A1KP042788")
        assert not validate_vin_checksum("1M8GDM9AXKP04278")

    def test_ocr_corrections(self):
        assert correct_vin_ocr_errors("VF1AB12C3D456789O") == "VF1AB12C3D4567890"
        assert correct_vin_ocr_errors("VFIAB12C3D4567890") == "VF1AB12C3D4567890"
        assert correct_vin_ocr_errors("VF1AB12C3D456789Q") == "VF1AB12C3D4567890"

    def test_suggestion(self):
        assert suggest_vin_correction("VF1AB12C3D456789O") == "VF1AB12C3D4567890"
        assert suggest_vin_correction("VF1AB12C3D4567890") is None
        assert suggest_vin_correction("VF1AB") is None

    def test_describe_vin(self):
        result = describe_vin("vf1ab12c3d456789o")
        assert result["vin"] == "VF1AB12C3D456789O"
        assert result["is_format_valid"] is False
        assert result["suggestion"] == "VF1AB12C3D4567890"


class TestPlateAndDate:

    @pytest.mark.parametrize("plate", ["AB-123-CD", "ab 123 cd", "AB123CD", "123 ABC 45", "1234 AB 2A"])
    def test_valid_plates(self, plate):
        assert is_plate_format(plate)

    @pytest.mark.parametrize("plate", ["A-123-CD", "ABC-12-DE", "Renault", ""])
    def test_invalid_plates(self, plate):
        assert not is_plate_format(plate)

    @pytest.mark.parametrize("value", ["2019", "12/03/2017", "01.02.15", "Mars 2020"])
    def test_readable_dates(self, value):
        assert is_registration_date_format(value)

    def test_unreadable_date(self):
        assert not is_registration_date_format("inconnue")


class TestCheckVehicleRecord:

    def test_clean_record(self):
        record = VehicleRecord(
            registrationPlate="AB-123-CD",
            vin="VF1AB12C3D4567890",
            firstRegistrationDate="2019",
        )
        assert check_vehicle_record(record) == []

    def test_empty_record_has_no_hints(self):
        assert check_vehicle_record(VehicleRecord()) == []

    def test_hints(self):
        record = VehicleRecord(
            registrationPlate="Renault",
            vin="VF1AB12",
            firstRegistrationDate="inconnue",
        )
        hints = check_vehicle_record(record)
        assert len(hints) == 3
        assert any("17 caractères attendus (7 lus)" in h for h in hints)

    def test_vin_suggestion_hint(self):
        hints = check_vehicle_record(VehicleRecord(vin="VF1AB12C3D456789O"))
        assert hints == ["N° VIN (châssis): caractères I/O/Q invalides, vouliez-vous dire VF1AB12C3D4567890 ?"]

    def test_record_not_modified(self):
        record = VehicleRecord(vin="VF1AB12C3D456789O")
        check_vehicle_record(record)
        assert record.vin == "VF1AB12C3D456789O"
