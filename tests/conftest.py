"""
Pytest Configuration and Fixtures

Shared fixtures and configuration for all tests.
"""

import pytest
import numpy as np
import pandas as pd
import tempfile
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend; must be set before importing pyplot

from occupancy.utils.config_manager import ConfigManager


class FakeEngine:
    """Deterministic stand-in for an external occupancy engine."""

    AIC = {
        'psi(.) p(.)': 212.4,
        'psi(cov1) p(.)': 180.2,
        'psi(.) p(surv)': 214.0,
        'psi(cov2) p(surv)': 209.7,
    }

    BACK_TRANSFORMS = {
        ('state', (1.0, 0.0)): (0.498, 0.075),
        ('state', (1.0, 1.0)): (0.925, 0.0367),
        ('det', None): (0.502, 0.024),
    }

    def __init__(self):
        self.fit_calls = []

    def fit(self, data, detection_formula, occupancy_formula):
        self.fit_calls.append((detection_formula, occupancy_formula))
        n_params = 2 + (detection_formula != '~1') + (occupancy_formula != '~1')
        return {
            'detection': detection_formula,
            'occupancy': occupancy_formula,
            'n_params': n_params,
            'n_sites': data.n_sites,
        }

    def model_selection(self, fits):
        return pd.DataFrame([
            {'model': name, 'n_params': fit['n_params'], 'aic': self.AIC.get(name, 250.0)}
            for name, fit in fits.items()
        ])

    def dredge(self, fit):
        return pd.DataFrame({
            'model': ['psi(cov1) p(.)', 'psi(.) p(.)'],
            'n_params': [3, 2],
            'aic': [180.2, 212.4],
        })

    def back_transform(self, fit, submodel, coefficients=None):
        key = (submodel, tuple(coefficients) if coefficients is not None else None)
        return self.BACK_TRANSFORMS[key]

    def predict(self, fit, submodel, newdata):
        x = np.asarray(newdata.iloc[:, 0].values, dtype=float)
        return pd.DataFrame({
            'estimate': 1.0 / (1.0 + np.exp(-(0.2 + 2.5 * x))),
            'se': np.full(len(x), 0.05),
        })


class FailingEngine(FakeEngine):
    """Engine whose every call fails the way a non-converging fit would."""

    def fit(self, data, detection_formula, occupancy_formula):
        raise RuntimeError("Hessian is singular")

    def model_selection(self, fits):
        raise RuntimeError("models fitted to different data")

    def dredge(self, fit):
        raise RuntimeError("global model has no covariates")

    def back_transform(self, fit, submodel, coefficients=None):
        raise RuntimeError("coefficient vector has wrong length")


@pytest.fixture(autouse=True)
def reset_config():
    """Keep the singleton configuration from leaking between tests."""
    ConfigManager().reset()
    yield
    ConfigManager().reset()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def failing_engine():
    return FailingEngine()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_table():
    """Twelve sites, four surveys, three site and one survey covariate."""
    rng = np.random.default_rng(42)
    n_sites = 12
    detections = rng.integers(0, 2, size=(n_sites, 4))
    detections[1] = 0

    df = pd.DataFrame({'site': np.arange(1, n_sites + 1)})
    for j in range(4):
        df[f'y{j + 1}'] = detections[:, j]
    df['cov1'] = rng.normal(0, 1, n_sites).round(2)
    df['cov2'] = rng.normal(0, 1, n_sites).round(2)
    df['cov3'] = rng.integers(5, 18, n_sites)
    for j in range(4):
        df[f'surv{j + 1}'] = rng.normal(0, 1, n_sites).round(2)
    return df


@pytest.fixture
def sample_csv(sample_table, tmp_path):
    path = tmp_path / "sample_data.csv"
    sample_table.to_csv(path, index=False)
    return path


@pytest.fixture
def config_file(sample_csv, tmp_path):
    """YAML config mirroring configs/config.yaml, pointed at sample_csv."""
    import yaml

    config = {
        'data': {
            'path': str(sample_csv),
            'detection_cols': [2, 3, 4, 5],
            'site_cov_cols': [6, 7, 8],
            'obs_cov_cols': {'surv': [9, 10, 11, 12]},
        },
        'models': [
            {'name': 'psi(.) p(.)', 'detection': '~1', 'occupancy': '~1'},
            {'name': 'psi(cov1) p(.)', 'detection': '~1', 'occupancy': '~cov1'},
            {'name': 'psi(.) p(surv)', 'detection': '~surv', 'occupancy': '~1'},
            {'name': 'psi(cov2) p(surv)', 'detection': '~surv', 'occupancy': '~cov2'},
        ],
        'estimates': [
            {'name': 'Occupancy_1', 'model': 'psi(cov1) p(.)', 'submodel': 'state', 'coefficients': [1, 0]},
            {'name': 'Occupancy_cov1', 'model': 'psi(cov1) p(.)', 'submodel': 'state', 'coefficients': [1, 1]},
            {'name': 'Detection_1', 'model': 'psi(cov1) p(.)', 'submodel': 'det'},
        ],
        'prediction': {'covariate': 'cov1', 'submodel': 'state'},
        'intervals': {'confidence_level': 0.95},
    }
    path = tmp_path / "config.yaml"
    with open(path, 'w') as f:
        yaml.safe_dump(config, f)
    return path


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
