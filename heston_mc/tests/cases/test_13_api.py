import pytest

from heston_mc import __version__
from heston_mc.backend.app import app

from .common import AnalyticalPricer, get_default_params


SMALL_RUN = {'num_paths': 2_000, 'num_steps': 20, 'num_rngs': 2, 'num_sims': 250, 'seed': 7}


@pytest.fixture
def client():
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json() == {
        'status': 'healthy',
        'service': 'Heston MC API',
        'version': __version__,
    }


def test_price_vanilla(client):
    response = client.post('/api/price', json={'kernel': 'europeanVanilla', 'config': SMALL_RUN})
    assert response.status_code == 200

    data = response.get_json()
    assert data['kernel'] == 'europeanVanilla'
    assert data['num_paths'] == 2_000
    assert data['num_simgroups'] == 4
    assert data['call_price'] > 0 and data['put_price'] > 0
    low, high = data['call_confidence_95']
    assert low < data['call_price'] < high
    assert 'verification' not in data


def test_price_is_reproducible(client):
    body = {'kernel': 'europeanVanilla', 'config': SMALL_RUN}
    first = client.post('/api/price', json=body).get_json()
    second = client.post('/api/price', json=body).get_json()
    assert first['call_price'] == second['call_price']
    assert first['put_price'] == second['put_price']


def test_price_barrier(client):
    response = client.post('/api/price', json={
        'kernel': 'europeanBarrier',
        'params': {'upper_barrier': 120.0, 'lower_barrier': 80.0},
        'config': SMALL_RUN,
    })
    assert response.status_code == 200
    data = response.get_json()
    assert data['call_price'] >= 0 and data['put_price'] >= 0


def test_price_verification_failure(client):
    response = client.post('/api/price', json={
        'kernel': 'europeanVanilla',
        'config': SMALL_RUN,
        'expected_call': 0.0,
        'expected_put': 0.0,
    })
    assert response.status_code == 200

    verification = response.get_json()['verification']
    assert verification['passed'] is False
    assert verification['checked'] == ['call', 'put']
    assert {m['quantity'] for m in verification['mismatches']} == {'call', 'put'}


def test_price_rejects_unknown_kernel(client):
    response = client.post('/api/price', json={'kernel': 'europeanAsian'})
    assert response.status_code == 400
    assert 'kernel' in response.get_json()['error']


def test_price_rejects_missing_kernel(client):
    response = client.post('/api/price', json={'config': SMALL_RUN})
    assert response.status_code == 400


def test_price_rejects_bad_params(client):
    response = client.post('/api/price', json={'kernel': 'europeanVanilla', 'params': {'rho': 2.0}})
    assert response.status_code == 400
    assert 'rho' in response.get_json()['error']


def test_barrier_kernel_without_levels(client):
    response = client.post('/api/price', json={'kernel': 'europeanBarrier', 'config': SMALL_RUN})
    assert response.status_code == 400


def test_reference(client):
    response = client.post('/api/reference', json={})
    assert response.status_code == 200

    data = response.get_json()
    expected_call, expected_put = AnalyticalPricer(get_default_params()).prices()
    assert data['call_price'] == pytest.approx(expected_call)
    assert data['put_price'] == pytest.approx(expected_put)


def test_reference_rejects_zero_vol_of_vol(client):
    response = client.post('/api/reference', json={'params': {'xi': 0.0}})
    assert response.status_code == 400


@pytest.mark.parametrize("config", [{'num_paths': 12.5}, {'num_paths': True}, {'num_workers': 1.5}])
def test_price_rejects_fractional_counts(client, config):
    response = client.post('/api/price', json={'kernel': 'europeanVanilla', 'config': config})
    assert response.status_code == 400


def test_price_rejects_unknown_param(client):
    response = client.post('/api/price', json={
        'kernel': 'europeanVanilla', 'params': {'sigma': 0.5}, 'config': SMALL_RUN,
    })
    assert response.status_code == 400
    assert 'sigma' in response.get_json()['error']
