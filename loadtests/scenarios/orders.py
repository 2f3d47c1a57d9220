"""Order store load test scenarios.

Three stateful SequentialTaskSet journeys: a customer checking out and then
tracking the order, staff walking an order through fulfilment, and a
cancellation that is followed by an (expected) illegal transition.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import admin_note, checkout_payload
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState

_FULFILMENT_STEPS = ("confirmed", "processing", "shipped", "delivered")


class _OrderJourney(SequentialTaskSet):
    customized_share = 0.2

    def on_start(self):
        self.state = OrderState()

    def place_order(self):
        payload = checkout_payload(customized=random.random() < self.customized_share)
        with self.client.post("/orders", json=payload, catch_response=True, name="POST /orders") as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["order_id"]
                self.state.tracking_id = body["tracking_id"]
            else:
                resp.failure(f"Place order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    def change_status(self, status, expect_conflict=False):
        with self.client.patch(
            f"/orders/{self.state.order_id}/status",
            json={"status": status},
            catch_response=True,
            name="PATCH /orders/{id}/status",
        ) as resp:
            if expect_conflict:
                if resp.status_code == 409:
                    resp.success()
                else:
                    resp.failure(f"Expected 409 for {status}, got {resp.status_code}")
            elif resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Change to {status} failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()


class CheckoutAndTrackJourney(_OrderJourney):
    """Place Order -> Track (x3, like the polling tracking page)."""

    @task
    def checkout(self):
        self.place_order()

    @task
    def track(self):
        for _ in range(3):
            with self.client.get(
                f"/orders/track/{self.state.tracking_id}",
                catch_response=True,
                name="GET /orders/track/{tracking_id}",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Track failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class AdminFulfilmentJourney(_OrderJourney):
    """Place Order -> Confirm -> Process -> Ship -> Deliver, with a note."""

    @task
    def checkout(self):
        self.place_order()

    @task
    def fulfil(self):
        for status in _FULFILMENT_STEPS:
            self.change_status(status)

    @task
    def annotate(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/notes",
            json={"note": admin_note()},
            catch_response=True,
            name="POST /orders/{id}/notes",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add note failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def list_delivered(self):
        self.client.get("/orders?status=delivered", name="GET /orders?status=")

    @task
    def done(self):
        self.interrupt()


class CancellationJourney(_OrderJourney):
    """Place Order -> Cancel -> Confirm (rejected with 409)."""

    @task
    def checkout(self):
        self.place_order()

    @task
    def cancel(self):
        self.change_status("cancelled")

    @task
    def confirm_after_cancel(self):
        self.change_status("confirmed", expect_conflict=True)

    @task
    def done(self):
        self.interrupt()


class OrderStoreUser(HttpUser):
    """Realistic mix: mostly shoppers tracking orders, some staff activity."""

    wait_time = between(0.5, 2)
    tasks = {
        CheckoutAndTrackJourney: 6,
        AdminFulfilmentJourney: 3,
        CancellationJourney: 1,
    }
