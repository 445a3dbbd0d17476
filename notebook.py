# /// script
# [tool.marimo.runtime]
# auto_instantiate = false
# ///

import marimo

__generated_with = "0.18.4"
app = marimo.App(width="medium")


@app.cell
def _():
    import marimo as mo
    return (mo,)


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    # Bayesian Regression, GLMs and Mixed Models with PyMC

    This notebook fits the same kind of model twice for four datasets: once the classical way with
    `statsmodels`, once the Bayesian way with PyMC. For each Bayesian fit we look at the default priors,
    check that the chains converged, summarize the posterior and compute a quantity that is awkward to get
    from the classical fit but trivial from posterior draws.

    - **Meat pH**: linear regression on a log-transformed predictor
    - **Donner party**: logistic regression
    - **Incomplete block design**: linear mixed model
    - **Seed germination**: binomial GLMM for overdispersed counts

    The helpers used below live in the `bayesreg` package next to this notebook.
    """)
    return


@app.cell
def _():
    import logging

    import arviz as az
    import matplotlib.pyplot as plt
    import numpy as np

    from bayesreg import (
        BayesFit,
        SamplerConfig,
        age_at_even_odds,
        as_matrix,
        cell_probability,
        check_convergence,
        coefficient_table,
        compare_estimates,
        define_binomial_glmm,
        define_linear_model,
        define_logistic_model,
        define_mixed_model,
        fit_bayes,
        fit_logit,
        fit_mixed,
        fit_ols,
        fit_quasibinomial,
        posterior_summary,
        prior_summary,
        read_donner,
        read_incomplete_block,
        read_meat,
        read_overdispersion,
        sample_prior_predictive,
        summarize_draws,
        time_to_ph,
        treatment_difference,
    )
    from bayesreg.data import describe
    from bayesreg.plots import (
        plot_derived,
        plot_prior_posterior,
        plot_proportions,
        plot_regression,
        plot_trace,
    )

    logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")
    az.style.use("arviz-darkgrid")
    return (
        BayesFit,
        SamplerConfig,
        age_at_even_odds,
        as_matrix,
        cell_probability,
        check_convergence,
        coefficient_table,
        compare_estimates,
        define_binomial_glmm,
        define_linear_model,
        define_logistic_model,
        define_mixed_model,
        describe,
        fit_bayes,
        fit_logit,
        fit_mixed,
        fit_ols,
        fit_quasibinomial,
        np,
        plot_derived,
        plot_prior_posterior,
        plot_proportions,
        plot_regression,
        plot_trace,
        plt,
        posterior_summary,
        prior_summary,
        read_donner,
        read_incomplete_block,
        read_meat,
        read_overdispersion,
        sample_prior_predictive,
        summarize_draws,
        time_to_ph,
        treatment_difference,
    )


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ## Sampler Settings

    Every Bayesian fit below is a single call:

    ```python
    fit = fit_bayes(spec, chains=4, cores=4)
    ```

    which hands the chain and core counts straight to `pm.sample`. The `nutpie` sampler is usually the
    fastest choice. Sampling all four models takes a little while, so it only starts once the button is
    clicked.
    """)
    return


@app.cell
def _(mo):
    chains_slider = mo.ui.slider(start=1, stop=8, value=4, label="Chains", show_value=True)
    cores_slider = mo.ui.slider(start=1, stop=8, value=4, label="Cores", show_value=True)
    sampler_selector = mo.ui.dropdown(
        options={"PyMC NUTS": "pymc", "nutpie": "nutpie"},
        value="nutpie",
        label="Sampler",
    )
    run_button = mo.ui.run_button(label="click to sample")

    mo.hstack([chains_slider, cores_slider, sampler_selector, run_button], justify="start")
    return chains_slider, cores_slider, run_button, sampler_selector


@app.cell
def _(SamplerConfig, chains_slider, cores_slider, sampler_selector):
    config = SamplerConfig.from_env(
        chains=chains_slider.value,
        cores=cores_slider.value,
        nuts_sampler=sampler_selector.value,
    )
    config
    return (config,)


@app.cell
def _(BayesFit):
    # Sampled fits by (case, sampler settings), kept while sliders move
    fits: dict[tuple, BayesFit] = {}
    return (fits,)


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ## 1. Meat pH: Linear Regression

    The pH of a carcass drops in the hours after slaughter. The measurements were taken at 1, 2, 4, 6
    and 8 hours, two carcasses each. pH is roughly linear in the *log* of time, so we derive
    `log_time` when reading the data.
    """)
    return


@app.cell
def _(read_meat):
    meat = read_meat()
    meat
    return (meat,)


@app.cell
def _(describe, meat, mo):
    mo.md(f"""
    {describe(meat, "pH")}
    """)
    return


@app.cell
def _(fit_ols, meat):
    meat_ols = fit_ols(meat, "pH ~ log_time")
    meat_ols.summary()
    return (meat_ols,)


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    The Bayesian version has the same mean structure. We only need to name the response and the
    predictors; the priors are filled in with weakly informative defaults scaled to the data.
    """)
    return


@app.cell
def _(define_linear_model, meat, prior_summary):
    meat_spec = define_linear_model(meat, "pH", ["log_time"])
    prior_summary(meat_spec.priors)
    return (meat_spec,)


@app.cell
def _(meat_spec):
    meat_spec.model
    return


@app.cell
def _(config, fit_bayes, fits, meat_spec, mo, run_button):
    _key = ("meat", *config.sample_kwargs().items())
    if _key not in fits:
        mo.stop(
            not run_button.value,
            mo.callout("Click the button at the top to sample the models.", kind="info"),
        )
        fits[_key] = fit_bayes(meat_spec, config)
    meat_fit = fits[_key]
    meat_fit
    return (meat_fit,)


@app.cell
def _(check_convergence, meat_fit, posterior_summary):
    meat_diagnostics = check_convergence(meat_fit)
    posterior_summary(meat_fit)
    return (meat_diagnostics,)


@app.cell
def _(meat_diagnostics, mo):
    mo.callout(
        "All chains converged." if meat_diagnostics.ok else "; ".join(meat_diagnostics.problems()),
        kind="success" if meat_diagnostics.ok else "warn",
    )
    return


@app.cell
def _(meat_fit, plot_trace, plt):
    plot_trace(meat_fit)
    plt.gcf()
    return


@app.cell
def _(meat, meat_fit, plot_regression):
    plot_regression(meat, "log_time", "pH", meat_fit)
    return


@app.cell
def _(coefficient_table, compare_estimates, meat_fit, meat_ols):
    compare_estimates(coefficient_table(meat_ols), meat_fit)
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ### When does the pH reach 5.7?

    Solving $5.7 = \alpha + \beta \log t$ gives $t = \exp((5.7 - \alpha) / \beta)$. With posterior draws
    we simply do that arithmetic draw by draw on the `Intercept` and `log_time` columns of the sample
    matrix, and get a full posterior for the time.

    ```python
    draws = as_matrix(meat_fit)
    time = np.exp((5.7 - draws["Intercept"]) / draws["log_time"])
    ```
    """)
    return


@app.cell
def _(as_matrix, meat_fit, summarize_draws, time_to_ph):
    meat_draws = as_matrix(meat_fit)
    meat_time = time_to_ph(meat_draws, target=5.7)
    summarize_draws(meat_time)
    return (meat_time,)


@app.cell
def _(meat_time, plot_derived):
    plot_derived(meat_time)
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ## 2. Donner Party: Logistic Regression

    Survival of the adult members of the Donner party, stranded in the Sierra Nevada in the winter of
    1846–47, as a function of age and sex.
    """)
    return


@app.cell
def _(read_donner):
    donner = read_donner()
    donner.head()
    return (donner,)


@app.cell
def _(donner):
    donner.groupby("sex")["survived"].agg(["count", "mean"])
    return


@app.cell
def _(coefficient_table, donner, fit_logit):
    donner_glm = fit_logit(donner, "survived ~ age + sex")
    coefficient_table(donner_glm)
    return (donner_glm,)


@app.cell
def _(define_logistic_model, donner, prior_summary):
    donner_spec = define_logistic_model(donner, "survived", ["age", "sex"])
    prior_summary(donner_spec.priors)
    return (donner_spec,)


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    Before fitting, it is worth checking what the default priors imply. Below the prior for the age
    coefficient is compared to its posterior once the model has been sampled.
    """)
    return


@app.cell
def _(donner_spec, sample_prior_predictive):
    donner_prior = sample_prior_predictive(donner_spec, draws=1000, random_seed=1846)
    return (donner_prior,)


@app.cell
def _(config, donner_spec, fit_bayes, fits, mo, run_button):
    _key = ("donner", *config.sample_kwargs().items())
    if _key not in fits:
        mo.stop(
            not run_button.value,
            mo.callout("Click the button at the top to sample the models.", kind="info"),
        )
        fits[_key] = fit_bayes(donner_spec, config)
    donner_fit = fits[_key]
    donner_fit
    return (donner_fit,)


@app.cell
def _(check_convergence, donner_fit, posterior_summary):
    check_convergence(donner_fit)
    posterior_summary(donner_fit)
    return


@app.cell
def _(donner_fit, donner_prior, plot_prior_posterior, plt):
    _, _ax = plt.subplots(figsize=(6, 4))
    plot_prior_posterior(donner_fit, donner_prior, var="beta", coef="age", ax=_ax)
    return


@app.cell
def _(donner, donner_fit, plot_regression, plt):
    _fig, _axes = plt.subplots(1, 2, figsize=(10, 4), sharey=True)
    for _ax, _sex, _terms in zip(_axes, ["Female", "Male"], [(), ("sex[T.Male]",)]):
        plot_regression(
            donner[donner["sex"] == _sex], "age", "survived", donner_fit, terms=_terms, ax=_ax, jitter=0.03
        )
        _ax.set_title(_sex)
    _fig
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ### At what age were the odds of survival even?

    The survival probability is one half where the linear predictor is zero, so for women
    $\text{age} = -\alpha / \beta_{\text{age}}$ and for men the sex coefficient is added to $\alpha$.
    """)
    return


@app.cell
def _(age_at_even_odds, as_matrix, donner_fit, summarize_draws):
    donner_draws = as_matrix(donner_fit)
    donner_even = {
        "Female": age_at_even_odds(donner_draws),
        "Male": age_at_even_odds(donner_draws, sex="Male"),
    }
    {sex: summarize_draws(draws).round(1).to_dict() for sex, draws in donner_even.items()}
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ## 3. Incomplete Block Design: Linear Mixed Model

    Seven treatments were compared in seven blocks, but each block only had room for three of them.
    Every pair of treatments meets in exactly one block. Blocks are modelled as random intercepts.
    """)
    return


@app.cell
def _(read_incomplete_block):
    blocks = read_incomplete_block()
    blocks.pivot(index="block", columns="treatment", values="growth")
    return (blocks,)


@app.cell
def _(blocks, coefficient_table, fit_mixed):
    blocks_lmm = fit_mixed(blocks, "growth ~ treatment", group="block")
    coefficient_table(blocks_lmm)
    return (blocks_lmm,)


@app.cell
def _(blocks, define_mixed_model, prior_summary):
    blocks_spec = define_mixed_model(blocks, "growth", ["treatment"], group="block")
    prior_summary(blocks_spec.priors)
    return (blocks_spec,)


@app.cell
def _(blocks_spec, config, fit_bayes, fits, mo, run_button):
    _key = ("blocks", *config.sample_kwargs().items())
    if _key not in fits:
        mo.stop(
            not run_button.value,
            mo.callout("Click the button at the top to sample the models.", kind="info"),
        )
        fits[_key] = fit_bayes(blocks_spec, config)
    blocks_fit = fits[_key]
    blocks_fit
    return (blocks_fit,)


@app.cell
def _(blocks_fit, check_convergence, posterior_summary):
    check_convergence(blocks_fit)
    posterior_summary(blocks_fit)
    return


@app.cell
def _(blocks_fit, blocks_lmm, coefficient_table, compare_estimates):
    compare_estimates(coefficient_table(blocks_lmm), blocks_fit)
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ### Is treatment G better than treatment D?

    The difference of two treatment effects is the difference of two columns of the sample matrix.
    """)
    return


@app.cell
def _(as_matrix, blocks_fit, summarize_draws, treatment_difference):
    blocks_draws = as_matrix(blocks_fit)
    g_minus_d = treatment_difference(blocks_draws, "G", "D")
    summarize_draws(g_minus_d)
    return (g_minus_d,)


@app.cell
def _(g_minus_d, plot_derived):
    plot_derived(g_minus_d)
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ## 4. Seed Germination: Overdispersion

    Germinated seeds out of those sown on each of 21 plates, for two seed varieties and two root
    extracts. The plates differ more than binomial variation allows. The classical fix is a
    quasi-binomial model; the Bayesian one is a random intercept per plate.
    """)
    return


@app.cell
def _(plot_proportions, read_overdispersion):
    seeds = read_overdispersion()
    plot_proportions(seeds, "germinated", "total", by="extract")
    return (seeds,)


@app.cell
def _(coefficient_table, fit_quasibinomial, mo, seeds):
    seeds_glm = fit_quasibinomial(seeds, "seed * extract", "germinated", "total")
    mo.vstack(
        [
            mo.md(f"Estimated dispersion: **{seeds_glm.scale:.2f}**"),
            coefficient_table(seeds_glm),
        ]
    )
    return


@app.cell
def _(define_binomial_glmm, prior_summary, seeds):
    seeds_spec = define_binomial_glmm(
        seeds, "germinated", "total", ["seed", "extract", "seed:extract"], group="plate"
    )
    prior_summary(seeds_spec.priors)
    return (seeds_spec,)


@app.cell
def _(config, fit_bayes, fits, mo, run_button, seeds_spec):
    _key = ("seeds", *config.sample_kwargs().items())
    if _key not in fits:
        mo.stop(
            not run_button.value,
            mo.callout("Click the button at the top to sample the models.", kind="info"),
        )
        fits[_key] = fit_bayes(seeds_spec, config, target_accept=0.95)
    seeds_fit = fits[_key]
    seeds_fit
    return (seeds_fit,)


@app.cell
def _(check_convergence, posterior_summary, seeds_fit):
    check_convergence(seeds_fit)
    posterior_summary(seeds_fit)
    return


@app.cell(hide_code=True)
def _(mo):
    mo.md(r"""
    ### Germination probability of O75 seeds on cucumber extract

    For a typical plate (group effect zero) the probability is the inverse logit of the intercept plus
    the coefficients that apply to that cell.
    """)
    return


@app.cell
def _(as_matrix, cell_probability, np, plot_derived, plt, seeds_fit, summarize_draws):
    seeds_draws = as_matrix(seeds_fit)
    _p = cell_probability(
        seeds_draws, ["seed[T.O75]", "extract[T.cucumber]", "seed[T.O75]:extract[T.cucumber]"]
    )
    _, _ax = plt.subplots(figsize=(6, 4))
    plot_derived(_p, ax=_ax)
    _ax.set_xlim(0, 1)
    (summarize_draws(_p).round(3), _ax, np.mean(seeds_draws["sigma_group"]))
    return


@app.cell
def _(mo):
    mo.md("""
    <br>
    <br>
    ---
    ## Resources

    - [PyMC documentation](https://www.pymc.io/projects/docs/en/stable/)
    - [ArviZ](https://www.arviz.org/en/latest/) for diagnostics and posterior summaries
    - [statsmodels](https://www.statsmodels.org/stable/) for the classical fits
    """)
    return


if __name__ == "__main__":
    app.run()
