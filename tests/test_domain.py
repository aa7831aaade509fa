import unittest

from pydantic import ValidationError

from tempo_tray.domain import RefreshRequest, TempoColor, TempoDayResponse, TempoNowResponse


class TestTempoColor(unittest.TestCase):
    def test_from_code(self):
        self.assertEqual(TempoColor.from_code(1), TempoColor.BLUE)
        self.assertEqual(TempoColor.from_code(2), TempoColor.WHITE)
        self.assertEqual(TempoColor.from_code(3), TempoColor.RED)
        self.assertEqual(TempoColor.from_code(0), TempoColor.UNKNOWN)
        self.assertEqual(TempoColor.from_code(-1), TempoColor.UNKNOWN)

    def test_labels_are_french(self):
        self.assertEqual(
            [c.label for c in TempoColor],
            ["BLEU", "BLANC", "ROUGE", "INCONNU", "ERREUR"],
        )


class TestResponses(unittest.TestCase):
    def test_day_payload_with_extra_fields(self):
        day = TempoDayResponse.model_validate_json(
            b'{"dateJour":"2024-01-15","codeJour":2,"periode":"2023-2024","libCouleur":"Blanc"}'
        )
        self.assertEqual(day.date_jour, "2024-01-15")
        self.assertEqual(day.code_jour, 2)
        self.assertEqual(day.periode, "2023-2024")

    def test_now_payload(self):
        now = TempoNowResponse.model_validate_json(
            b'{"applicableIn":0,"codeCouleur":1,"codeHoraire":2,"tarifKwh":0.1296,"libTarif":"HC Bleu"}'
        )
        self.assertEqual(now.code_horaire, 2)
        self.assertEqual(now.lib_tarif, "HC Bleu")

    def test_negative_tariff_rejected(self):
        with self.assertRaises(ValidationError):
            TempoNowResponse.model_validate_json(b'{"tarifKwh":-1}')

    def test_missing_or_null_day_code_is_unknown(self):
        for body in (b'{"dateJour":"2024-01-01"}', b'{"codeJour":null}'):
            day = TempoDayResponse.model_validate_json(body)
            self.assertEqual(day.code_jour, 0)
            self.assertEqual(TempoColor.from_code(day.code_jour), TempoColor.UNKNOWN)

    def test_missing_or_null_tariff_is_zero(self):
        for body in (b'{"libTarif":"HC Bleu"}', b'{"tarifKwh":null}'):
            self.assertEqual(TempoNowResponse.model_validate_json(body).tarif_kwh, 0.0)

    def test_wrong_type_still_rejected(self):
        with self.assertRaises(ValidationError):
            TempoDayResponse.model_validate_json(b'{"codeJour":"rouge"}')

    def test_request_shapes(self):
        self.assertIs(RefreshRequest.TODAY.response_model, TempoDayResponse)
        self.assertIs(RefreshRequest.TOMORROW.response_model, TempoDayResponse)
        self.assertIs(RefreshRequest.NOW.response_model, TempoNowResponse)
        self.assertEqual(RefreshRequest.TOMORROW.path, "jourTempo/tomorrow")


if __name__ == "__main__":
    unittest.main()
