"""
HTTP API tests through the test app (in-process backend, fake clock).

Covers auth, show registration, the hold -> confirm / cancel flow, the
payment webhook, and the error body shape.
"""

from typing import Any

import orjson
import pytest

from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.service.ticketing.app.command.handle_payment_webhook_use_case import sign_payload
from src.service.ticketing.domain.entity.user_entity import UserRole


@pytest.fixture
def manager(auth_headers):
    return auth_headers('manager-1', UserRole.MANAGER)


@pytest.fixture
def registered_show(client, manager, show_payload) -> dict[str, Any]:
    response = client.post('/api/show', json=show_payload, headers=manager)
    assert response.status_code == 201
    return response.json()


def hold(client, headers, seat_codes, show_id='show-api'):
    return client.post(
        '/api/booking/hold', json={'show_id': show_id, 'seat_codes': seat_codes}, headers=headers
    )


class TestCommonEndpoints:
    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'
        assert response.json()['state_backend'] == 'memory'

    def test_metrics(self, client, registered_show, auth_headers):
        hold(client, auth_headers(), ['A1'])

        response = client.get('/metrics')

        assert response.status_code == 200
        assert 'seat_hold_requests_total' in response.text


class TestShowApi:
    def test_register_requires_token(self, client, show_payload):
        assert client.post('/api/show', json=show_payload).status_code == 401

    def test_register_requires_manager(self, client, show_payload, auth_headers):
        response = client.post('/api/show', json=show_payload, headers=auth_headers())

        assert response.status_code == 403

    def test_register_returns_layout(self, registered_show):
        assert registered_show['show_id'] == 'show-api'
        assert registered_show['seats']['A1'] == {'tier_name': 'Premium', 'price': 350}
        assert registered_show['seats']['C3'] == {'tier_name': 'Regular', 'price': 200}
        assert len(registered_show['seats']) == 9

    def test_register_twice_is_a_conflict(self, client, registered_show, manager, show_payload):
        response = client.post('/api/show', json=show_payload, headers=manager)

        assert response.status_code == 409

    def test_malformed_request_is_400(self, client, manager):
        response = client.post('/api/show', json={'movie_id': 'm'}, headers=manager)

        assert response.status_code == 400

    def test_layout_and_availability_are_public(self, client, registered_show, auth_headers):
        hold(client, auth_headers(), ['B1'])

        layout = client.get('/api/show/show-api/layout')
        availability = client.get('/api/show/show-api/availability')

        assert layout.status_code == 200
        assert availability.status_code == 200
        body = availability.json()
        assert body['seats']['B1'] == 'held'
        assert body['counts'] == {'free': 8, 'held': 1, 'booked': 0}

    def test_unknown_show(self, client):
        assert client.get('/api/show/nope/availability').status_code == 404


class TestBookingApi:
    def test_hold_then_confirm(self, client, registered_show, auth_headers):
        customer = auth_headers()

        created = hold(client, customer, ['a1', 'B1'])
        assert created.status_code == 201
        booking = created.json()
        assert booking['status'] == 'pending'
        assert booking['total_amount'] == 550
        assert [s['seat_code'] for s in booking['seats']] == ['A1', 'B1']

        confirmed = client.post(
            '/api/booking/confirm',
            json={'booking_id': booking['booking_id'], 'payment_ref': 'pi_1'},
            headers=customer,
        )
        assert confirmed.status_code == 200
        assert confirmed.json()['status'] == 'confirmed'

        fetched = client.get(f'/api/booking/{booking["booking_id"]}', headers=customer)
        assert fetched.json()['payment_ref'] == 'pi_1'

    def test_conflicting_hold_names_the_seats(self, client, registered_show, auth_headers):
        hold(client, auth_headers('user-x'), ['A1', 'A2'])

        response = hold(client, auth_headers('user-y'), ['A2', 'A3'])

        assert response.status_code == 409
        assert response.json()['conflicting_seats'] == ['A2']

    def test_unknown_seat_is_400(self, client, registered_show, auth_headers):
        response = hold(client, auth_headers(), ['Z9'])

        assert response.status_code == 400

    def test_confirm_after_sweep_asks_for_refund(
        self, client, registered_show, auth_headers, api_clock
    ):
        customer = auth_headers()
        booking = hold(client, customer, ['C1']).json()

        api_clock.advance(settings.HOLD_TTL_SECONDS + 1)
        report = client.portal.call(container.expire_stale_holds_use_case().run)
        assert report.expired_booking_ids == [booking['booking_id']]

        response = client.post(
            '/api/booking/confirm',
            json={'booking_id': booking['booking_id'], 'payment_ref': 'pi_late'},
            headers=customer,
        )
        assert response.status_code == 409
        assert response.json()['reason'] == 'HoldExpired'
        assert response.json()['refund_required'] is True

    def test_cancel_and_list(self, client, registered_show, auth_headers):
        customer = auth_headers()
        first = hold(client, customer, ['B2']).json()
        hold(client, customer, ['B3'])

        cancelled = client.post(
            '/api/booking/cancel',
            json={'booking_id': first['booking_id'], 'reason': 'changed plans'},
            headers=customer,
        )
        assert cancelled.status_code == 200
        assert cancelled.json()['status'] == 'cancelled'

        again = client.post(
            '/api/booking/cancel', json={'booking_id': first['booking_id']}, headers=customer
        )
        assert again.status_code == 409
        assert again.json()['status'] == 'cancelled'

        mine = client.get('/api/booking/my_booking', headers=customer).json()
        assert len(mine) == 2
        only_cancelled = client.get(
            '/api/booking/my_booking', params={'booking_status': 'cancelled'}, headers=customer
        ).json()
        assert [b['booking_id'] for b in only_cancelled] == [first['booking_id']]

    def test_other_customer_cannot_read_booking(self, client, registered_show, auth_headers):
        booking = hold(client, auth_headers('user-x'), ['A3']).json()

        response = client.get(
            f'/api/booking/{booking["booking_id"]}', headers=auth_headers('user-y')
        )
        admin = client.get(
            f'/api/booking/{booking["booking_id"]}',
            headers=auth_headers('root', UserRole.ADMIN),
        )

        assert response.status_code == 403
        assert admin.status_code == 200

    def test_invalid_token(self, client, registered_show):
        response = hold(client, {'Authorization': 'Bearer not-a-jwt'}, ['A1'])

        assert response.status_code == 401


class TestPaymentWebhook:
    def post_event(self, client, event: dict[str, Any], signature: str | None = None):
        body = orjson.dumps(event)
        secret = settings.PAYMENT_WEBHOOK_SECRET.get_secret_value()
        return client.post(
            '/api/booking/payment/webhook',
            content=body,
            headers={
                'Content-Type': 'application/json',
                'X-Payment-Signature': signature or sign_payload(body, secret),
            },
        )

    def test_succeeded_confirms_booking(self, client, registered_show, auth_headers):
        customer = auth_headers()
        booking = hold(client, customer, ['B1']).json()

        response = self.post_event(
            client,
            {
                'type': 'payment.succeeded',
                'data': {'booking_id': booking['booking_id'], 'payment_ref': 'pi_hook'},
            },
        )

        assert response.status_code == 200
        assert response.json() == {'received': True}
        fetched = client.get(f'/api/booking/{booking["booking_id"]}', headers=customer).json()
        assert fetched['status'] == 'confirmed'

    def test_bad_signature_is_401(self, client, registered_show):
        response = self.post_event(
            client, {'type': 'payment.failed', 'data': {'booking_id': 'x'}}, signature='00'
        )

        assert response.status_code == 401
