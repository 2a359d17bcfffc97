"""Screening API tests."""

from datetime import timedelta

from conftest import auth_headers, create_screening, tomorrow_at

SCREENINGS_URL = '/api/v1/screenings/'


def screening_payload(movie, theatre, start_time, screen_number=1):
    return {
        'movie_id': movie.id,
        'theatre_id': theatre.id,
        'screen_number': screen_number,
        'start_time': start_time.isoformat(),
        'format': 'IMAX',
        'base_price': '12.50',
    }


class TestScheduleScreeningApi:
    def test_overlap_scenario(self, client, manager, movie, theatre):
        headers = auth_headers(manager)

        first = client.post(SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(10)), headers=headers)
        overlap = client.post(SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(11)), headers=headers)
        other_screen = client.post(
            SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(11), screen_number=2), headers=headers
        )

        assert first.status_code == 201
        assert first.json()['end_time'] == tomorrow_at(12).isoformat()
        assert first.json()['movie_title'] == movie.title
        assert overlap.status_code == 409
        assert overlap.json()['detail'] == 'There is a scheduling conflict with another screening'
        assert other_screen.status_code == 201

    def test_customer_cannot_schedule(self, client, customer, movie, theatre):
        response = client.post(
            SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(10)), headers=auth_headers(customer)
        )

        assert response.status_code == 403

    def test_negative_price_rejected(self, client, manager, movie, theatre):
        payload = screening_payload(movie, theatre, tomorrow_at(10))
        payload['base_price'] = '-1'

        response = client.post(SCREENINGS_URL, json=payload, headers=auth_headers(manager))

        assert response.status_code == 400
        assert 'base_price' in response.json()['errors']

    def test_update_rechecks_overlap(self, client, manager, movie, theatre):
        headers = auth_headers(manager)
        client.post(SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(10)), headers=headers)
        evening_id = client.post(
            SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(18)), headers=headers
        ).json()['id']

        response = client.put(
            f'/api/v1/screenings/{evening_id}',
            json={'start_time': tomorrow_at(11).isoformat()},
            headers=headers,
        )

        assert response.status_code == 409

    def test_delete(self, client, manager, movie, theatre):
        headers = auth_headers(manager)
        screening_id = client.post(
            SCREENINGS_URL, json=screening_payload(movie, theatre, tomorrow_at(10)), headers=headers
        ).json()['id']

        response = client.delete(f'/api/v1/screenings/{screening_id}', headers=headers)

        assert response.status_code == 204
        assert client.get(f'/api/v1/screenings/{screening_id}').status_code == 404


class TestScreeningQueriesApi:
    def test_list_and_filters(self, client, db_session, movie, theatre):
        create_screening(db_session, movie, theatre, tomorrow_at(10))
        create_screening(db_session, movie, theatre, tomorrow_at(10) + timedelta(days=2))

        everything = client.get(SCREENINGS_URL)
        one_day = client.get(SCREENINGS_URL, params={'date': tomorrow_at(10).date().isoformat()})

        assert everything.json()['total'] == 2
        assert one_day.json()['total'] == 1

    def test_formats(self, client):
        response = client.get('/api/v1/screenings/formats')

        assert response.json() == ['STANDARD', 'IMAX', 'DOLBY_ATMOS', '3D', '4D']

    def test_upcoming(self, client, db_session, movie, theatre):
        create_screening(db_session, movie, theatre, tomorrow_at(10))

        response = client.get('/api/v1/screenings/upcoming', params={'days': 3})

        assert list(response.json()) == [tomorrow_at(10).strftime('%Y-%m-%d')]

    def test_date_range(self, client, db_session, movie, theatre):
        create_screening(db_session, movie, theatre, tomorrow_at(10))
        day = tomorrow_at(10).date()

        ok = client.get('/api/v1/screenings/date-range', params={'start_date': day, 'end_date': day})
        reversed_range = client.get(
            '/api/v1/screenings/date-range', params={'start_date': day, 'end_date': day - timedelta(days=1)}
        )

        assert len(ok.json()) == 1
        assert reversed_range.status_code == 400

    def test_seat_availability(self, client, customer, screening):
        client.post(
            '/api/v1/bookings/',
            json={'screening_id': screening.id, 'seat_labels': ['B2', 'A1']},
            headers=auth_headers(customer),
        )

        booked = client.get(f'/api/v1/screenings/{screening.id}/booked-seats')
        available = client.get(f'/api/v1/screenings/{screening.id}/seats')
        layout = client.get(f'/api/v1/screenings/{screening.id}/layout')

        assert booked.json() == ['A1', 'B2']
        assert len(available.json()) == 48
        assert layout.json()['booked_seats'] == 2

    def test_screening_bookings_for_staff(self, client, customer, manager, screening):
        client.post(
            '/api/v1/bookings/',
            json={'screening_id': screening.id, 'seat_labels': ['A1']},
            headers=auth_headers(customer),
        )

        response = client.get(f'/api/v1/screenings/{screening.id}/bookings', headers=auth_headers(manager))

        assert response.status_code == 200
        assert response.json()[0]['booked_seats'] == ['A1']

    def test_missing_screening(self, client):
        response = client.get('/api/v1/screenings/9999')

        assert response.status_code == 404
        assert response.json()['error'] == 'not_found'
