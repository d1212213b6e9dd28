# %% [markdown]
# # Job Placement Prediction Pipeline
# ## Step One:
# Based on academic performance and demographic characteristics, can we predict a
# student's job placement status (placed vs not placed)?
# * The target variable is `status`, which indicates whether a student was placed in a job or not.
# * This is a classification problem: logistic regression, a decision tree and
#   gradient-boosted trees are compared on the same 80/20 split, and the tree is
#   cross-validated with 5 folds.
#
# # Coal Consumption Pipeline
# * The coal table has one row per region/country and one column per year.
#   It gets reshaped to a long table and the aggregate regions are plotted over time.

# %% [markdown]
# ### Imports and settings

# %%
import matplotlib.pyplot as plt
import pandas as pd

from functions import (
    assign_folds,
    calculate_prevalence,
    convert_to_category,
    cross_validate_tree,
    drop_columns,
    drop_missing_rows,
    encode_target,
    evaluate_model,
    fit_decision_tree,
    fit_gradient_boosting,
    fit_logistic_regression,
    load_csv,
    normalize_column_names,
    one_hot_encode,
    partition_regions,
    rename_region_column,
    reshape_long,
    retype_long,
    scale_numerical_columns,
    split_data,
    split_features_target,
)
from plotting import (
    plot_categorical_by_outcome,
    plot_correlation_heatmap,
    plot_numeric_by_outcome,
    plot_pairwise,
    plot_region_consumption,
    plot_roc_curves,
    plot_top_countries,
)

PLACEMENT_URL = "https://raw.githubusercontent.com/DG1606/CMS-R-2020/master/Placement_Data_Full_Class.csv"
COAL_URL = "https://raw.githubusercontent.com/UVADS/DS-3001/main/data/coal.csv"

SEED = 123
TRAIN_SIZE = 0.8
N_FOLDS = 5

# gradient-boosted trees
BOOST_DEPTH = 4
BOOST_ROUNDS = 100
BOOST_LEARNING_RATE = 0.1

TARGET = 'status'
POSITIVE_LABEL = 'Placed'
NEGATIVE_LABEL = 'Not Placed'
JOBS_DROP = ['sl_no', 'salary']  # identifier, and salary is only known for placed students
CATEGORY_COLS = ['gender', 'ssc_b', 'hsc_b', 'hsc_s', 'degree_t', 'workex', 'specialisation']

COAL_SKIPROWS = 2  # two lines of notes sit above the header
TOP_COUNTRIES = 5


def _finish(figures, show):
    if show:
        plt.show()
    for fig in figures:
        plt.close(fig)


# %% [markdown]
# ## Step Two: placement data

# %%
def placement_pipeline(source=PLACEMENT_URL, seed=SEED, train_size=TRAIN_SIZE,
                       n_folds=N_FOLDS, show=True):
    """
    Runs the placement analysis from download to the final accuracy report.

    Parameters:
    source (str): URL or path of the placement CSV.
    seed (int): Random seed used for the split, the folds and every model.
    train_size (float): Share of rows used for training. Default is 0.8.
    n_folds (int): Number of cross-validation folds. Default is 5.
    show (bool): Show the figures. If False they are closed without being displayed.

    Returns:
    dict: The evaluation results per model, the cross-validation accuracies and a summary table.
    """
    # %% Ingest and clean
    jobs = normalize_column_names(load_csv(source))
    jobs.info()

    jobs_clean = drop_columns(jobs, JOBS_DROP)
    jobs_clean = drop_missing_rows(jobs_clean)
    jobs_clean = encode_target(jobs_clean, TARGET, POSITIVE_LABEL, NEGATIVE_LABEL)
    jobs_clean = convert_to_category(jobs_clean, CATEGORY_COLS)

    # Make sure that the categorical variables don't have too many unique values
    for col in CATEGORY_COLS:
        print(f"Value counts for {col}:")
        print(jobs_clean[col].value_counts())
        print()

    calculate_prevalence(jobs_clean, TARGET)

    # %% Explore
    num_cols = [col for col in jobs_clean.select_dtypes('number').columns if col != TARGET]
    figures = []
    figures += plot_categorical_by_outcome(jobs_clean, CATEGORY_COLS, TARGET)
    figures += plot_numeric_by_outcome(jobs_clean, num_cols, TARGET)
    figures.append(plot_correlation_heatmap(jobs_clean, num_cols))
    figures.append(plot_pairwise(jobs_clean, num_cols, TARGET))
    _finish(figures, show)

    # %% Scale, encode and split
    jobs_encoded = scale_numerical_columns(jobs_clean, target_column=TARGET)
    jobs_encoded = one_hot_encode(jobs_encoded, CATEGORY_COLS)
    print(jobs_encoded.columns.tolist())

    train, test = split_data(jobs_encoded, train_size=train_size, random_state=seed)
    X_train, y_train = split_features_target(train, TARGET)
    X_test, y_test = split_features_target(test, TARGET)
    print(f"Train rows: {len(train)}   Test rows: {len(test)}")

    # %% Fit and evaluate
    models = {
        'Logistic Regression': fit_logistic_regression(X_train, y_train, random_state=seed),
        'Decision Tree': fit_decision_tree(X_train, y_train, random_state=seed),
        'Gradient Boosted Trees': fit_gradient_boosting(
            X_train, y_train,
            eval_set=[(X_train, y_train), (X_test, y_test)],
            max_depth=BOOST_DEPTH,
            n_estimators=BOOST_ROUNDS,
            learning_rate=BOOST_LEARNING_RATE,
            random_state=seed,
        ),
    }
    results = [evaluate_model(name, model, X_test, y_test) for name, model in models.items()]

    history = models['Gradient Boosted Trees'].evals_result()
    final_test_auc = history['validation_1']['auc'][-1]
    print(f"\nBoosting test AUC after {BOOST_ROUNDS} rounds: {final_test_auc:.4f}")

    _finish([plot_roc_curves(results)], show)

    # %% Cross-validate the tree on the training rows
    folds = assign_folds(len(X_train), k=n_folds, random_state=seed)
    cv_accuracy = cross_validate_tree(X_train, y_train, folds, random_state=seed)
    print(f"\n{n_folds}-fold decision tree accuracy per fold:")
    print(cv_accuracy)
    print(f"Mean CV accuracy: {cv_accuracy.mean():.4f}")

    # %% Report
    summary = pd.DataFrame(
        {'accuracy': [r.accuracy for r in results], 'auc': [r.roc_auc for r in results]},
        index=pd.Index([r.name for r in results], name='model'),
    )
    print("\nTest set summary:")
    print(summary)

    return {
        'results': {r.name: r for r in results},
        'cv_accuracy': cv_accuracy,
        'summary': summary,
    }


# %% [markdown]
# ## Step Three: coal data

# %%
def coal_pipeline(source=COAL_URL, skiprows=COAL_SKIPROWS, top_countries=TOP_COUNTRIES, show=True):
    """
    Reshapes the coal table to long format and plots regional and country consumption.

    Returns:
    dict: The long table plus its region and country partitions.
    """
    coal = rename_region_column(load_csv(source, skiprows=skiprows))
    print(coal.head())

    coal_long = retype_long(reshape_long(coal))
    coal_long.info()

    coal_region, coal_country = partition_regions(coal_long)
    print(f"Region rows: {len(coal_region)}   Country rows: {len(coal_country)}")

    figures = [plot_region_consumption(coal_region)]
    if len(coal_country):
        figures.append(plot_top_countries(coal_country, n=top_countries))
    _finish(figures, show)

    return {'long': coal_long, 'region': coal_region, 'country': coal_country}


# %%
if __name__ == '__main__':
    placement_pipeline()
    coal_pipeline()
