import unittest

from gym_backend.collection_names import AUDIT_LOGS_COLLECTION, gyms_collection

from testing_utils import ApiTestCase


class GymApiTests(ApiTestCase, unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.uid = self.sign_in()
        self.org = self.create_organization()
        self.base = f"/api/organizations/{self.org['id']}/gyms"

    def test_create_applies_defaults(self):
        gym = self.create_gym(self.org["id"])
        self.assertEqual(gym["status"], "ACTIVE")
        self.assertEqual(gym["members"], 0)
        self.assertEqual(gym["monthlyRevenue"], 0)
        self.assertEqual(gym["amenities"], [])
        self.assertEqual(gym["organizationId"], self.org["id"])
        self.assertIsNone(gym["latitude"])

    def test_create_requires_fields(self):
        response = self.client.post(self.base, json={"name": "Downtown"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["details"],
            [
                "address is required",
                "phone is required",
                "email is required",
                "capacity is required",
                "manager is required",
            ],
        )

    def test_create_under_missing_organization(self):
        response = self.client.post(
            "/api/organizations/nope/gyms",
            json={
                "name": "Downtown",
                "address": "1 Main St",
                "phone": "555",
                "email": "d@x.test",
                "capacity": 10,
                "manager": "Sam",
            },
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json()["error"],
            "Organization not found. Please create the organization first.",
        )
        self.assertEqual(self.store.query(gyms_collection("nope")), [])

    def test_create_rejects_non_numeric_capacity(self):
        response = self.client.post(
            self.base,
            json={
                "name": "Downtown",
                "address": "1 Main St",
                "phone": "555",
                "email": "d@x.test",
                "capacity": "lots",
                "manager": "Sam",
            },
        )
        self.assertEqual(response.status_code, 400)

    def test_list_under_missing_organization_is_empty(self):
        response = self.client.get("/api/organizations/nope/gyms")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "success": True,
                "data": [],
                "message": "No gyms found (organization doesn't exist yet)",
                "count": 0,
            },
        )

    def test_list_empty_and_populated(self):
        response = self.client.get(self.base)
        self.assertEqual(response.json()["message"], "No gyms found")

        self.create_gym(self.org["id"])
        response = self.client.get(self.base)
        self.assertEqual(response.json()["count"], 1)

    def test_get_missing_returns_404(self):
        response = self.client.get(f"{self.base}/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Gym not found")

    def test_update_keeps_zero_and_ignores_empty_strings(self):
        gym = self.create_gym(self.org["id"])
        response = self.client.put(
            f"{self.base}/{gym['id']}",
            json={"name": "", "latitude": 0.0, "members": 0, "amenities": ["pool"]},
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["name"], "Downtown")
        self.assertEqual(data["latitude"], 0.0)
        self.assertEqual(data["amenities"], ["pool"])
        self.assertEqual(data["lastModifiedBy"], self.uid)

    def test_status_only_update_touches_nothing_else(self):
        gym = self.create_gym(self.org["id"], amenities=["pool"], latitude=12.5)
        self.assert_status_only_update(
            gyms_collection(self.org["id"]), gym["id"], f"{self.base}/{gym['id']}"
        )

    def test_update_without_body_only_stamps(self):
        gym = self.create_gym(self.org["id"])
        response = self.client.put(f"{self.base}/{gym['id']}")
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["capacity"], 120)
        self.assertEqual(data["lastModifiedBy"], self.uid)

    def test_create_keeps_zero_coordinates(self):
        gym = self.create_gym(self.org["id"], latitude=0, longitude=0)
        self.assertEqual(gym["latitude"], 0.0)
        self.assertEqual(gym["longitude"], 0.0)

    def test_delete_writes_audit_log(self):
        gym = self.create_gym(self.org["id"])
        response = self.client.delete(f"{self.base}/{gym['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.store.get(gyms_collection(self.org["id"]), gym["id"]))

        (_, entry), = self.store.query(AUDIT_LOGS_COLLECTION)
        self.assertEqual(entry["action"], "delete_gym")
        self.assertEqual(entry["gymId"], gym["id"])
        self.assertEqual(entry["organizationId"], self.org["id"])


if __name__ == "__main__":
    unittest.main()
