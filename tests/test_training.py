"""Tests for the cross-validation trainer."""

import numpy as np
import pandas as pd
import pytest
from sklearn.base import clone

from hauspreis.config.settings import CrossValidationConfig, MethodsConfig
from hauspreis.data.loader import HousingData, prepare_housing_data
from hauspreis.errors import ConfigurationError, FittingError, MissingColumnError
from hauspreis.evaluation.metrics import score_model
from hauspreis.modeling.formula import Formula
from hauspreis.modeling.methods import MethodKind
from hauspreis.modeling.training import (
    ModelTrainer,
    fold_assignment,
    make_folds,
    select_best_index,
)

RESULT_COLUMNS = ["rmse", "rsquared", "mae", "rmse_sd", "rsquared_sd", "mae_sd"]


def _housing(frame: pd.DataFrame, target: str = "y") -> HousingData:
    return prepare_housing_data(frame, target)


class TestFolds:
    """Tests for the shared fold assignment."""

    def test_partition(self) -> None:
        """Test that every row is held out exactly once."""
        folds = make_folds(CrossValidationConfig(folds=4, seed=1), 22)
        test_rows = np.concatenate([test for _, test in folds])
        assert sorted(test_rows.tolist()) == list(range(22))
        for train, test in folds:
            assert not set(train) & set(test)

    def test_deterministic(self) -> None:
        """Test that the same seed gives the same assignment."""
        cv = CrossValidationConfig(folds=5, seed=1337)
        np.testing.assert_array_equal(fold_assignment(cv, 50), fold_assignment(cv, 50))

    def test_seed_changes_assignment(self) -> None:
        """Test that a different seed shuffles differently."""
        a = fold_assignment(CrossValidationConfig(folds=5, seed=1), 50)
        b = fold_assignment(CrossValidationConfig(folds=5, seed=2), 50)
        assert not np.array_equal(a, b)

    def test_fold_ids(self) -> None:
        """Test that fold ids run from 0 to k-1."""
        ids = fold_assignment(CrossValidationConfig(folds=3, seed=0), 30)
        assert set(ids.tolist()) == {0, 1, 2}

    def test_more_folds_than_rows(self) -> None:
        """Test that k > n raises error."""
        with pytest.raises(ConfigurationError, match="Cannot split 3 rows"):
            make_folds(CrossValidationConfig(folds=5), 3)


class TestSelectBestIndex:
    """Tests for the tie rule."""

    def test_lowest_rmse(self) -> None:
        """Test that the lowest mean RMSE wins (scores are negated)."""
        assert select_best_index({"mean_test_rmse": [-0.3, -0.1, -0.2]}) == 1

    def test_tie_goes_to_first(self) -> None:
        """Test that equal RMSE selects the earliest grid entry."""
        assert select_best_index({"mean_test_rmse": [-0.3, -0.1, -0.1]}) == 1


class TestModelTrainer:
    """Tests for ModelTrainer.train."""

    def test_ols_minimal(self, rng: np.random.Generator) -> None:
        """Test 10 rows, 2 columns, k=2 OLS gives one row and 10 predictions."""
        frame = pd.DataFrame({"a": rng.normal(size=10), "b": rng.normal(size=10)})
        frame["y"] = 12.0 + frame["a"] - 0.5 * frame["b"] + rng.normal(0, 0.1, 10)
        data = _housing(frame)

        model = ModelTrainer(CrossValidationConfig(folds=2, seed=1)).train(data, "ols")

        assert len(model.results) == 1
        assert list(model.results.columns) == RESULT_COLUMNS
        assert model.best_params == {}
        assert model.best_index == 0
        assert len(model.predict(data.frame)) == 10

    def test_ridge_prefers_least_regularization(self, rng: np.random.Generator) -> None:
        """Test that ridge on noiseless linear data picks the smallest lambda."""
        x = rng.uniform(0, 5, 80)
        data = _housing(pd.DataFrame({"x": x, "y": 11.0 + 0.4 * x}))
        grid = [{"lambda_": 0.1}, {"lambda_": 0.01}, {"lambda_": 0.001}]

        trainer = ModelTrainer(CrossValidationConfig(folds=5, seed=7))
        model = trainer.train(data, "ridge", grid=grid)

        assert model.best_params == {"lambda_": 0.001}
        assert model.best_index == 2
        assert model.results["lambda_"].tolist() == [0.1, 0.01, 0.001]
        assert model.results["rmse"].is_monotonic_decreasing
        assert score_model(model, data).rmsle < 0.01

    def test_lasso_zeroes_noise(self, rng: np.random.Generator) -> None:
        """Test that a large lambda removes 20 noise features exactly."""
        n = 200
        frame = pd.DataFrame(
            rng.normal(size=(n, 20)), columns=[f"noise{i}" for i in range(20)]
        )
        frame.insert(0, "signal", rng.normal(size=n))
        frame["y"] = 12.0 + frame["signal"] + rng.normal(0, 0.1, n)
        data = _housing(frame)

        trainer = ModelTrainer(CrossValidationConfig(folds=5, seed=3))
        model = trainer.train(data, "lasso", grid=[{"lambda_": 0.2}])

        coef = model.coefficients()
        assert coef is not None
        assert (coef.drop("signal") == 0.0).all()
        assert coef["signal"] != 0.0

    def test_tree_single_leaf_predicts_mean(self, rng: np.random.Generator) -> None:
        """Test that a pruning-to-root grid predicts the training mean."""
        frame = pd.DataFrame({"a": rng.normal(size=60), "b": rng.normal(size=60)})
        frame["y"] = 12.0 + rng.normal(0, 0.2, 60)
        data = _housing(frame)

        trainer = ModelTrainer(CrossValidationConfig(folds=4, seed=11))
        model = trainer.train(data, "tree", grid=[{"cp": 10.0}, {"cp": 20.0}])

        np.testing.assert_allclose(model.predict(data.frame), frame["y"].mean())
        assert model.coefficients() is None

    def test_tie_selects_first_entry(self, rng: np.random.Generator) -> None:
        """Test that identical fold results select the first grid entry."""
        frame = pd.DataFrame({"a": rng.normal(size=40)})
        frame["y"] = 12.0 + rng.normal(0, 0.2, 40)
        data = _housing(frame)

        trainer = ModelTrainer(CrossValidationConfig(folds=4, seed=5))
        model = trainer.train(data, "tree", grid=[{"cp": 10.0}, {"cp": 20.0}])

        assert model.results["rmse"].iloc[0] == model.results["rmse"].iloc[1]
        assert model.best_index == 0
        assert model.best_params == {"cp": 10.0}

    def test_results_rows_match_grid(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test one results row per grid entry, in grid order."""
        grid = {"mixing": [0.5, 0.9], "lambda_": [0.1, 0.01]}
        model = ModelTrainer(cv_config).train(housing_data, "elastic_net", grid=grid)

        assert len(model.results) == 4
        assert list(model.results.columns) == ["mixing", "lambda_", *RESULT_COLUMNS]
        assert model.results[["mixing", "lambda_"]].to_dict("records") == [
            {"mixing": 0.5, "lambda_": 0.1},
            {"mixing": 0.5, "lambda_": 0.01},
            {"mixing": 0.9, "lambda_": 0.1},
            {"mixing": 0.9, "lambda_": 0.01},
        ]
        assert (model.results["rmse_sd"] >= 0).all()

    def test_results_are_fold_statistics(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that mean/sd match RMSE recomputed on the shared folds."""
        model = ModelTrainer(cv_config).train(housing_data, "ols")

        fold_rmse = []
        for train, test in make_folds(cv_config, housing_data.n_rows):
            refit = clone(model.pipeline).fit(
                housing_data.X.iloc[train], housing_data.y.iloc[train]
            )
            pred = refit.predict(housing_data.X.iloc[test])
            fold_rmse.append(np.sqrt(np.mean((pred - housing_data.y.iloc[test]) ** 2)))

        assert model.best_rmse == pytest.approx(np.mean(fold_rmse))
        assert model.best_rmse_sd == pytest.approx(np.std(fold_rmse, ddof=1))

    def test_categorical_coefficients(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test dummy coding with the first level as reference."""
        model = ModelTrainer(cv_config).train(housing_data, "ols")
        coef = model.coefficients()
        assert coef is not None
        assert "Neighborhood_OldTown" in coef.index
        assert "Neighborhood_Somerst" in coef.index
        assert "Neighborhood_NAmes" not in coef.index
        assert coef["Neighborhood_Somerst"] == pytest.approx(0.2, abs=0.05)

    def test_manual_ols_uses_configured_features(
        self,
        housing_data: HousingData,
        cv_config: CrossValidationConfig,
        methods_config: MethodsConfig,
    ) -> None:
        """Test that manual OLS defaults to the configured columns."""
        model = ModelTrainer(cv_config, methods_config).train(housing_data, "manual_ols")
        assert model.features == ["GrLivArea", "Neighborhood"]
        assert str(model.formula) == "SalePrice ~ GrLivArea + Neighborhood"

    def test_manual_ols_default_features_missing(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that default Ames columns absent from the table raise error."""
        with pytest.raises(MissingColumnError, match="GarageCars"):
            ModelTrainer(cv_config).train(housing_data, "manual_ols")

    def test_stepwise_selects_informative(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test forward stepwise inside the pipeline."""
        model = ModelTrainer(cv_config).train(
            housing_data, "forward", grid=[{"max_features": 2}, {"max_features": 4}]
        )
        coef = model.coefficients()
        assert coef is not None
        assert "GrLivArea" in coef.index
        assert len(model.results) == 2

    def test_grid_from_config(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that configured grids override method defaults."""
        methods = MethodsConfig(grids={"tree": [{"cp": 0.05}]})
        model = ModelTrainer(cv_config, methods).train(housing_data, MethodKind.TREE)
        assert model.results["cp"].tolist() == [0.05]

    def test_grid_from_config_single_value(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that a scalar grid axis tries that one value."""
        methods = MethodsConfig(grids={"lasso": {"lambda_": 0.01}})
        model = ModelTrainer(cv_config, methods).train(housing_data, "lasso")
        assert model.results["lambda_"].tolist() == [0.01]

    def test_explicit_formula(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test training on an explicit subset of columns."""
        formula = Formula.parse("SalePrice ~ OverallQual")
        model = ModelTrainer(cv_config).train(housing_data, "ols", formula=formula)
        assert model.features == ["OverallQual"]
        assert len(model.predict(housing_data.frame)) == housing_data.n_rows

    def test_missing_formula_column(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that a formula naming an absent column raises error."""
        with pytest.raises(MissingColumnError, match="PoolQC"):
            ModelTrainer(cv_config).train(
                housing_data, "ols", formula=Formula.of("SalePrice", ["PoolQC"])
            )

    def test_predict_missing_column(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that predicting without a trained column raises error."""
        model = ModelTrainer(cv_config).train(housing_data, "ols")
        with pytest.raises(MissingColumnError, match="Neighborhood"):
            model.predict(housing_data.frame.drop(columns="Neighborhood"))

    def test_empty_grid(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that an empty grid raises error."""
        with pytest.raises(ConfigurationError, match="empty"):
            ModelTrainer(cv_config).train(housing_data, "ridge", grid=[])

    def test_unknown_method(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that unknown methods raise a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown method 'random_forest'"):
            ModelTrainer(cv_config).train(housing_data, "random_forest")

    def test_non_convergence_is_fitting_error(
        self,
        housing_data: HousingData,
        cv_config: CrossValidationConfig,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that an exhausted solver budget fails the fit."""
        monkeypatch.setattr("hauspreis.modeling.methods.ENET_MAX_ITER", 1)
        with pytest.raises(FittingError, match="LASSO failed to fit"):
            ModelTrainer(cv_config).train(housing_data, "lasso", grid=[{"lambda_": 1e-6}])

    def test_unseen_level_is_fitting_error(self, rng: np.random.Generator) -> None:
        """Test that a level only present in a held-out fold fails the fit."""
        n = 30
        zone = ["RL"] * (n - 1) + ["FV"]
        frame = pd.DataFrame({"a": rng.normal(size=n), "zone": zone})
        frame["y"] = 12.0 + frame["a"] + rng.normal(0, 0.1, n)
        data = _housing(frame)

        with pytest.raises(FittingError, match="OLS failed to fit"):
            ModelTrainer(CrossValidationConfig(folds=3, seed=0)).train(data, "ols")

    def test_save_predictions(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test held-out predictions of the selected entry."""
        cv = cv_config.model_copy(update={"save_predictions": True})
        model = ModelTrainer(cv).train(housing_data, "lasso", grid=[{"lambda_": 0.01}])

        preds = model.fold_predictions
        assert preds is not None
        assert list(preds.columns) == ["row", "fold", "pred", "obs", "lambda_"]
        assert len(preds) == housing_data.n_rows
        np.testing.assert_array_equal(
            preds["fold"].to_numpy(), fold_assignment(cv, housing_data.n_rows)
        )
        np.testing.assert_allclose(preds["obs"], housing_data.y)

        fold_rmse = [
            np.sqrt(np.mean((g["pred"] - g["obs"]) ** 2)) for _, g in preds.groupby("fold")
        ]
        assert model.best_rmse == pytest.approx(np.mean(fold_rmse))

    def test_no_predictions_by_default(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that fold predictions are not kept unless requested."""
        model = ModelTrainer(cv_config).train(housing_data, "ols")
        assert model.fold_predictions is None
        assert model.training_time_s > 0


class TestTrainAll:
    """Tests for ModelTrainer.train_all."""

    def test_shared_folds(
        self, housing_data: HousingData, cv_config: CrossValidationConfig
    ) -> None:
        """Test that every method sees the same fold assignment."""
        cv = cv_config.model_copy(update={"save_predictions": True})
        trainer = ModelTrainer(cv, MethodsConfig(grids={"lasso": [{"lambda_": 0.01}]}))
        models = trainer.train_all(housing_data, ["ols", "lasso"])

        assert list(models) == ["ols", "lasso"]
        np.testing.assert_array_equal(
            models["ols"].fold_predictions["fold"],
            models["lasso"].fold_predictions["fold"],
        )

    def test_enabled_from_config(
        self,
        housing_data: HousingData,
        cv_config: CrossValidationConfig,
        methods_config: MethodsConfig,
    ) -> None:
        """Test that enabled methods run in configured order."""
        methods = methods_config.model_copy(update={"enabled": ["tree", "manual_ols"]})
        models = ModelTrainer(cv_config, methods).train_all(housing_data)
        assert list(models) == ["tree", "manual_ols"]
        assert models["tree"].label == "Decision Tree"
