import json
import unittest
from pathlib import Path

from transformer.app.errors import MalformedRecord, UnknownReportType
from transformer.app.parsing import normalize_time, utc_today
from transformer.app.reports import BUILDERS, build_hail, build_report, build_tornado, build_wind
from transformer.app.schemas import HailReport, ReportType, TornadoReport, WindReport

HAIL_LINE = b"2132,450,9 SE Granbury,Hood,TX,32.36,-97.66,DELAYED REPORT emergency management reported 4.5 inch hail in Pecan Plantation. (FWD)"


class BuilderTests(unittest.TestCase):
    def test_hail_line(self):
        report = build_hail(HAIL_LINE, today="2024-05-17")
        self.assertIsInstance(report, HailReport)
        self.assertEqual(report.size, 450)
        self.assertEqual(report.time, normalize_time("2024-05-17", "2132"))
        self.assertEqual((report.distance, report.direction, report.landmark), (9, "SE", "Granbury"))
        self.assertEqual(report.lat, "32.36")
        self.assertEqual(report.lon, "-97.66")

    def test_defaults_to_todays_utc_date(self):
        report = build_wind(b"1835,UNK,2 N Holt,Irwin,GA,31.63,-83.15,Trees down on McLeod Road. (TAE)")
        self.assertEqual(report.time, normalize_time(utc_today(), "1835"))
        self.assertEqual(report.speed, 0)

    def test_unparseable_time_is_zero(self):
        report = build_tornado(b"UNK,1,Lamont,Jefferson,FL,30.35,-83.83,Remarks (TAE)")
        self.assertEqual(report.time, 0)
        self.assertEqual(report.f_scale, 1)

    def test_short_lines_are_rejected_by_every_builder(self):
        short = b"450,9 SE Granbury,Hood,TX,32.36,-97.66,DELAYED REPORT"
        for report_type, builder in BUILDERS.items():
            with self.subTest(report_type=report_type):
                with self.assertRaises(MalformedRecord):
                    builder(short)

    def test_empty_line_is_malformed(self):
        with self.assertRaises(MalformedRecord):
            build_hail(b"")

    def test_trailing_line_terminator_is_not_part_of_remarks(self):
        for ending in (b"\n", b"\r\n"):
            with self.subTest(ending=ending):
                report = build_wind(b"1835,UNK,2 N Holt,Irwin,GA,31.63,-83.15,Trees down on McLeod Road. (TAE)" + ending)
                self.assertEqual(report.remarks, "Trees down on McLeod Road. (TAE)")

    def test_columns_round_trip(self):
        columns = ["1200", "100", "3 NNW Norman", "Cleveland", "OK", "35.25", "-97.45", "Large hail on I-35. (OUN)"]
        report = build_hail(",".join(columns).encode("utf-8"), today="2024-05-17")
        self.assertEqual(
            [report.county, report.state, report.lat, report.lon, report.remarks],
            columns[3:],
        )
        self.assertEqual(report.size, int(columns[1]))

    def test_build_report_dispatches_by_type(self):
        line = b"1131,UNK,2 SSW Lamont,Jefferson,FL,30.35,-83.83,A tornado touched down. (TAE)"
        self.assertIsInstance(build_report(ReportType.TORNADO, line), TornadoReport)
        self.assertIsInstance(build_report(ReportType.WIND, line), WindReport)
        self.assertIsInstance(build_report(ReportType.HAIL, line), HailReport)

    def test_build_report_without_type_fails(self):
        with self.assertRaises(UnknownReportType):
            build_report(None, HAIL_LINE)

    def test_every_report_type_has_a_builder(self):
        self.assertEqual(set(BUILDERS), set(ReportType))


class RegressionLinesTests(unittest.TestCase):
    def test_regression_lines(self):
        fixtures = Path(__file__).parent / "report_lines.json"
        cases = json.loads(fixtures.read_text(encoding="utf-8"))

        for case in cases:
            with self.subTest(case["name"]):
                report = build_report(ReportType(case["report_type"]), case["line"].encode("utf-8"), today=case["today"])
                self.assertEqual(report.model_dump(), case["expected"])


if __name__ == "__main__":
    unittest.main()
