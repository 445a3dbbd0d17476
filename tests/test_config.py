"""
Unit tests for sampler configuration.
"""

import pytest

from bayesreg.config import SamplerConfig


class TestSamplerConfig:

    def test_defaults(self) -> None:
        config = SamplerConfig()
        assert config.chains == 4
        assert config.cores == 4
        assert config.draws == 1000
        assert config.nuts_sampler == "pymc"

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"draws": 0}, "draws"),
            ({"tune": -1}, "tune"),
            ({"chains": 0}, "chains"),
            ({"cores": 0}, "cores"),
            ({"target_accept": 1.0}, "target_accept"),
            ({"nuts_sampler": "gibbs"}, "nuts_sampler"),
        ],
    )
    def test_invalid_values_raise(self, kwargs, match) -> None:
        with pytest.raises(ValueError, match=match):
            SamplerConfig(**kwargs)

    def test_sample_kwargs_round_trip_fields(self) -> None:
        config = SamplerConfig(chains=2, cores=1, random_seed=3)
        kwargs = config.sample_kwargs()
        assert kwargs["chains"] == 2
        assert kwargs["cores"] == 1
        assert kwargs["random_seed"] == 3
        assert SamplerConfig(**kwargs) == config


class TestFromEnv:

    def test_environment_overrides_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("BAYESREG_CHAINS", "2")
        monkeypatch.setenv("BAYESREG_SEED", "42")
        monkeypatch.setenv("BAYESREG_SAMPLER", "nutpie")
        config = SamplerConfig.from_env()
        assert config.chains == 2
        assert config.random_seed == 42
        assert config.nuts_sampler == "nutpie"

    def test_explicit_overrides_win(self, monkeypatch) -> None:
        monkeypatch.setenv("BAYESREG_CORES", "8")
        config = SamplerConfig.from_env(cores=1)
        assert config.cores == 1

    def test_empty_variable_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("BAYESREG_DRAWS", "")
        assert SamplerConfig.from_env().draws == 1000

    def test_invalid_environment_value_raises(self, monkeypatch) -> None:
        monkeypatch.setenv("BAYESREG_CHAINS", "0")
        with pytest.raises(ValueError, match="chains"):
            SamplerConfig.from_env()
