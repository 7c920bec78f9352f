"""Tests for risk register and configuration file I/O."""

import json

import pandas as pd
import pytest
import yaml

from risk_simulator.core.exceptions import ConfigurationError, DataImportError, FileFormatError
from risk_simulator.core.risk_model import RiskModel
from risk_simulator.io.io_csv import CSVExporter, CSVImporter
from risk_simulator.io.io_json import JSONExporter, JSONImporter
from risk_simulator.templates.template_generator import SAMPLE_RISKS, TemplateGenerator


class TestJSONImporter:
    """Test JSON risk and configuration import."""

    def test_import_risk_list(self, tmp_path):
        path = tmp_path / "risks.json"
        path.write_text(json.dumps([{"name": "a", "likelihood": 10, "kill": 1}]))

        risks = JSONImporter().import_risks(str(path))
        assert risks == [{"name": "a", "likelihood": 10, "kill": 1}]

    def test_import_risks_object(self, tmp_path):
        path = tmp_path / "risks.json"
        path.write_text(json.dumps({"risks": [{"likelihood": 10}, "junk"]}))

        risks = JSONImporter().import_risks(str(path))
        assert risks == [{"likelihood": 10}, {}]

    def test_import_risks_yaml(self, tmp_path):
        path = tmp_path / "risks.yaml"
        path.write_text(yaml.safe_dump({"risks": [{"name": "b", "likelihood": 20, "min": 1, "mode": 2, "max": 3}]}))

        risks = JSONImporter().import_risks(str(path))
        assert len(RiskModel(risks).active_risks) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataImportError):
            JSONImporter().import_risks(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "risks.json"
        path.write_text("{not json")
        with pytest.raises(FileFormatError):
            JSONImporter().import_risks(str(path))

    def test_wrong_top_level_type(self, tmp_path):
        path = tmp_path / "risks.json"
        path.write_text(json.dumps("risks"))
        with pytest.raises(FileFormatError) as exc_info:
            JSONImporter().import_risks(str(path))
        assert exc_info.value.context['detected_format'] == "str"

    def test_import_configuration_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"iterations": 100000, "delaySlack": 5, "seed": 3}))

        config = JSONImporter().import_configuration(str(path))
        assert config == {"iterations": 50000, "delay_slack": 5.0, "budget_slack": 0.0,
                          "seed": 3, "backend": "python"}

    def test_import_configuration_yaml_section(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("simulation:\n  iterations: 500\n  budget_slack: 1000\n  backend: numba\n")

        config = JSONImporter().import_configuration(str(path))
        assert config["iterations"] == 500
        assert config["budget_slack"] == 1000.0
        assert config["backend"] == "numba"

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert JSONImporter().import_configuration(str(path))["iterations"] == 20000

    def test_invalid_configuration_value(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"backend": "gpu"}))
        with pytest.raises(ConfigurationError) as exc_info:
            JSONImporter().import_configuration(str(path))
        assert exc_info.value.context['config_key'] == "backend"

    def test_configuration_not_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps([1, 2]))
        with pytest.raises(ConfigurationError):
            JSONImporter().import_configuration(str(path))

    def test_missing_configuration(self, tmp_path):
        with pytest.raises(ConfigurationError):
            JSONImporter().import_configuration(str(tmp_path / "nope.json"))


class TestJSONExporter:
    """Test JSON risk register export."""

    def test_export_and_reimport(self, tmp_path):
        path = tmp_path / "out" / "register.json"
        JSONExporter().export_risk_register(SAMPLE_RISKS, str(path))

        data = json.loads(path.read_text())
        assert len(data["risks"]) == len(SAMPLE_RISKS)
        assert data["risks"][0]["delay_min"] == 2.0

        reimported = JSONImporter().import_risks(str(path))
        assert len(RiskModel(reimported).active_risks) == len(RiskModel(SAMPLE_RISKS).active_risks)


class TestCSVImporter:
    """Test CSV and Excel risk import with flexible column mapping."""

    def test_import_with_legacy_headers(self, tmp_path):
        path = tmp_path / "risks.csv"
        path.write_text(
            "Name,Likelihood,Min,Mode,Max,Kill,Notes\n"
            "Vendor part late,25,10,20,40,0,External dependency\n"
            "Earthquake,1,,,,1,Disaster\n"
            ",,,,,,\n"
            "Scope creep,40,3,7,14,,\n"
        )

        risks = CSVImporter().import_risks_from_csv(str(path))
        assert len(risks) == 4
        assert risks[1]["delay_min"] is None
        assert risks[1]["kill"] == 1
        assert risks[2] == {}

        model = RiskModel(risks)
        assert [r.name for r in model.active_risks] == ["Vendor part late", "Earthquake", "Scope creep"]
        assert [r.index for r in model.active_risks] == [0, 1, 3]
        assert model.summary.dropped_indices == [2]
        assert model.active_risks[1].kill
        assert not model.active_risks[2].kill

    def test_blank_rows_count_towards_row_limit(self, tmp_path):
        path = tmp_path / "risks.csv"
        lines = ["name,likelihood,kill"]
        lines += ["blank" if i % 2 else f"r{i},10,1" for i in range(60)]
        path.write_text("\n".join(line.replace("blank", ",,") for line in lines) + "\n")

        risks = CSVImporter().import_risks_from_csv(str(path))
        model = RiskModel(risks)
        assert len(risks) == 60
        assert len(model.active_risks) == 25
        assert model.active_risks[-1].name == "r48"

    def test_title_column_alias(self, tmp_path):
        path = tmp_path / "risks.csv"
        path.write_text("title,likelihood_pct,delay_min,delay_mode,delay_max,cost_min,cost_mode,cost_max\n"
                        "x,50,1,2,3,10,20,30\n")

        (risk,) = RiskModel(CSVImporter().import_risks_from_csv(str(path))).active_risks
        assert risk.name == "x"
        assert risk.probability == 0.5
        assert risk.samples_cost

    def test_fractional_probability_column_not_read_as_percent(self, tmp_path):
        path = tmp_path / "risks.csv"
        path.write_text("name,probability,min,mode,max\nx,0.5,1,2,3\n")
        with pytest.raises(FileFormatError):
            CSVImporter().import_risks_from_csv(str(path))

    def test_missing_likelihood_column(self, tmp_path):
        path = tmp_path / "risks.csv"
        path.write_text("name,min,mode,max\nx,1,2,3\n")
        with pytest.raises(FileFormatError):
            CSVImporter().import_risks_from_csv(str(path))

    def test_missing_csv(self, tmp_path):
        with pytest.raises(DataImportError):
            CSVImporter().import_risks_from_csv(str(tmp_path / "missing.csv"))

    def test_csv_round_trip(self, tmp_path):
        path = tmp_path / "register.csv"
        CSVExporter().export_risk_register(SAMPLE_RISKS, str(path))

        df = pd.read_csv(path)
        assert list(df.columns)[:2] == ["name", "likelihood"]

        risks = CSVImporter().import_risks_from_csv(str(path))
        model = RiskModel(risks)
        assert len(model.active_risks) == len(SAMPLE_RISKS)
        assert len(model.kill_risks) == 3

    def test_excel_template_import(self, tmp_path):
        path = tmp_path / "template.xlsx"
        TemplateGenerator().create_excel_template(path)

        risks = CSVImporter().import_risks_from_excel(str(path))
        model = RiskModel(risks)
        assert len(risks) == len(SAMPLE_RISKS)
        assert len(model.kill_risks) == 3
        assert model.active_risks[0].name == "Minor bugs backlog"

    def test_excel_export_round_trip(self, tmp_path):
        path = tmp_path / "register.xlsx"
        CSVExporter().export_risk_register(SAMPLE_RISKS[:2], str(path))

        risks = CSVImporter().import_risks_from_excel(str(path))
        assert [r["name"] for r in risks] == ["Minor bugs backlog", "Vendor part late"]
