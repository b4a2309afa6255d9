import unittest
from rest_framework import status
from rest_framework.exceptions import ValidationError
from apps.api.utils import error_response


class ErrorResponseTests(unittest.TestCase):
    def test_default_status_mapping_and_details(self):
        resp = error_response("NOT_FOUND", "Cart item not found", {"id": "A"})
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["code"], "NOT_FOUND")
        self.assertEqual(resp.data["error"]["status"], status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["details"], {"id": "A"})

    def test_storefront_codes_map_to_statuses(self):
        self.assertEqual(error_response("CONFLICT", "Out of stock").status_code, 409)
        self.assertEqual(error_response("SERVICE_UNAVAILABLE", "Down").status_code, 503)
        self.assertEqual(error_response("unknown_code", "Hmm").status_code, 400)

    def test_custom_status_override(self):
        resp = error_response("UNKNOWN", "oops", http_status=status.HTTP_202_ACCEPTED)
        self.assertEqual(resp.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(resp.data["error"]["message"], "oops")

    def test_hint_and_headers(self):
        resp = error_response(
            "SERVICE_UNAVAILABLE",
            "Catalog service unavailable",
            hint="Retry shortly.",
            headers={"Retry-After": 5},
        )
        self.assertEqual(resp.data["error"]["hint"], "Retry shortly.")
        self.assertEqual(resp["Retry-After"], "5")

    def test_validation_error_details_are_normalized(self):
        resp = error_response(
            "VALIDATION_ERROR", "Invalid", ValidationError({"code": ["Required."]})
        )
        self.assertEqual(resp.data["error"]["details"], {"code": ["Required."]})

    def test_rejects_blank_code_or_message(self):
        with self.assertRaises(ValueError):
            error_response("", "message")
        with self.assertRaises(ValueError):
            error_response("NOT_FOUND", "  ")
        with self.assertRaises(ValueError):
            error_response("NOT_FOUND", "missing", http_status=999)
