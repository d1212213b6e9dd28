import math
from dataclasses import dataclass, field
from io import StringIO

import numpy as np
import pandas as pd
import requests
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import auc, confusion_matrix, roc_curve
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import MinMaxScaler
from sklearn.tree import DecisionTreeClassifier
from xgboost import XGBClassifier

REQUEST_TIMEOUT = 30  # seconds

# %% [markdown]
# ## Function to load a CSV from a URL or a local path

# %%
def load_csv(source, **read_kwargs):
    """
    Loads a delimited text file into a DataFrame.

    Parameters:
    source (str): An http(s) URL or a local file path.
    **read_kwargs: Extra keyword arguments passed on to pd.read_csv (skiprows, na_values, ...).

    Returns:
    pd.DataFrame: The parsed table.
    """
    source = str(source)
    if source.startswith(('http://', 'https://')):
        response = requests.get(source, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()   # a failed download stops the run, there is no retry
        return pd.read_csv(StringIO(response.text), **read_kwargs)
    return pd.read_csv(source, **read_kwargs)

# %% [markdown]
# ## Function to normalize column names
# Lower case, no surrounding whitespace, and underscores instead of spaces.

# %%
def normalize_column_names(df):
    """
    Normalizes column names to lower case with spaces replaced by underscores.

    Parameters:
    df (pd.DataFrame): The input DataFrame.

    Returns:
    pd.DataFrame: DataFrame with normalized column names.
    """
    df = df.copy()
    df.columns = (
        pd.Index(df.columns.map(str))
        .str.strip()
        .str.lower()
        .str.replace(r'\s+', '_', regex=True)
    )
    return df

# %% [markdown]
# ## Function to Drop Columns from a DataFrame

# %%
def drop_columns(df, columns):
    """
    Drops specified columns from the DataFrame.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    columns (list): List of column names to drop.

    Returns:
    pd.DataFrame: DataFrame with specified columns dropped.
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise KeyError(f"Columns not found in the data: {missing}")
    return df.drop(columns=columns)

# %% [markdown]
# ## Function to convert categorical columns to category dtype

# %%
def convert_to_category(df, columns):
    """
    This function converts the columns given to a category dtype (from string or int or other dtypes).

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    columns (list): List of column names to convert to category dtype.

    Returns:
    pd.DataFrame: DataFrame with specified columns converted to category dtype.
    """
    df = df.copy()
    for col in columns:
        df[col] = df[col].astype('category')
    return df

# %% [markdown]
# ## Function to handle missing values
# Only the columns used for modeling matter here, a missing value anywhere else is left alone.

# %%
def drop_missing_rows(df, columns=None):
    """
    Drops the rows that have a missing value in any of the modeling columns.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    columns (list): Columns to check. If None, every column is checked.

    Returns:
    pd.DataFrame: DataFrame without missing values in the given columns.
    """
    before = len(df)
    df = df.dropna(subset=columns)
    dropped = before - len(df)
    if dropped:
        print(f"Dropped {dropped} rows with missing values")
    return df

# %% [markdown]
# ## Function to scale numerical columns
# In this function we will scale based on min-max scaling

# %%
def scale_numerical_columns(df, target_column=None, columns=None):
    """
    This function scales numerical columns using Min-Max scaling.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    target_column (str): The name of the target variable to exclude from scaling. Default is no excluded variable.
    columns (list): List of column names to scale. If None, all numerical columns will be scaled.

    Returns:
    pd.DataFrame: DataFrame with specified numerical columns scaled, excluding the target variable if specified.
    """
    df = df.copy()
    if columns is None:
        columns = df.select_dtypes(include=['number']).columns.tolist()
    columns = [col for col in columns if col != target_column]   # the target is never scaled
    if columns:
        df[columns] = MinMaxScaler().fit_transform(df[columns])
    return df

# %% [markdown]
# ## Function to turn the outcome into a 0/1 label
# The mapping is spelled out instead of relying on the order of the category levels,
# so "Placed" is always the positive class.

# %%
def encode_target(df, target_column, positive_label, negative_label):
    """
    Maps the two outcome labels to 1 (positive) and 0 (negative).

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    target_column (str): The outcome column.
    positive_label (str): Value that becomes 1.
    negative_label (str): Value that becomes 0.

    Returns:
    pd.DataFrame: DataFrame with an integer 0/1 target column.
    """
    observed = set(df[target_column].astype(str).unique())
    expected = {str(positive_label), str(negative_label)}
    unexpected = observed - expected
    if unexpected:
        raise ValueError(f"{target_column} has unexpected labels: {sorted(unexpected)}")
    if observed != expected:
        raise ValueError(f"{target_column} must contain both {sorted(expected)}, found {sorted(observed)}")

    df = df.copy()
    mapping = {str(positive_label): 1, str(negative_label): 0}
    df[target_column] = df[target_column].astype(str).map(mapping).astype(int)
    return df

# %% [markdown]
# ## Function to one-hot-encode categorical columns
# In this function we will use pandas get_dummies to one-hot-encode categorical columns

# %%
def one_hot_encode(df, columns=None):
    """
    This function one-hot-encodes specified categorical columns using pandas get_dummies.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    columns (list): List of column names to one-hot-encode. If no columns are specified, all categorical columns will be encoded.

    Returns:
    pd.DataFrame: DataFrame with specified categorical columns one-hot-encoded.
    """
    if columns is None:
        columns = df.select_dtypes(include=['category']).columns.tolist()   # this converts all categorical columns if none are specified
    if not columns:
        return df.copy()
    # drop_first=True to avoid having multiple columns that provide the same info.
    # A column with a single category produces no dummy at all.
    return pd.get_dummies(df, columns=columns, drop_first=True, dtype=int)

# %% [markdown]
# ## Function to Calculate Prevalence of Target Variable
# This function will output the prevalence of the positive class in the target variable.

# %%
def calculate_prevalence(df, target_column):
    """
    This function calculates the prevalence of the positive class in the target variable.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    target_column (str): The name of the 0/1 target variable column.

    Returns:
    the prevalence of the positive class in the target variable.
    """
    prevalence = df[target_column].mean()
    print(f"Classification Prevalence: {prevalence:.2%}")
    return prevalence

# %% [markdown]
# ## Function to split the data into train and test sets

# %%
def split_data(df, train_size=0.8, random_state=123):
    """
    This function shuffles the rows with a fixed seed and splits them into train and test sets.
    The train set holds exactly floor(train_size * N) rows and the test set the rest.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    train_size (float): Proportion of the rows in the train set. Default is 0.8.
    random_state (int): Random seed for reproducibility.

    Returns:
    The train and test DataFrames.
    """
    n_train = math.floor(train_size * len(df))
    train_df, test_df = train_test_split(
        df,
        train_size=n_train,
        shuffle=True,
        random_state=random_state
    )
    return train_df, test_df


def split_features_target(df, target_column):
    """Separates the predictors from the target."""
    return df.drop(columns=[target_column]), df[target_column]

# %% [markdown]
# ## Model fitting
# Each model is fit from scratch on whatever it is given, nothing is shared between them.

# %%
def fit_logistic_regression(X, y, random_state=123):
    # C is large enough that this is a plain maximum likelihood fit
    model = LogisticRegression(C=1e6, max_iter=5000, random_state=random_state)
    return model.fit(X, y)


def fit_decision_tree(X, y, random_state=123):
    model = DecisionTreeClassifier(random_state=random_state)
    return model.fit(X, y)


def fit_gradient_boosting(X, y, eval_set=None, max_depth=4, n_estimators=100,
                          learning_rate=0.1, random_state=123):
    """
    Fits gradient-boosted trees with xgboost.

    Parameters:
    X (pd.DataFrame): Training predictors.
    y (pd.Series): 0/1 training labels.
    eval_set (list): Optional list of (X, y) pairs whose log-loss and AUC are tracked every round.
    max_depth (int): Depth of each tree. Default is 4.
    n_estimators (int): Number of boosting rounds. Default is 100.
    learning_rate (float): Step size shrinkage. Default is 0.1.
    random_state (int): Random seed.

    Returns:
    XGBClassifier: The fitted model, with the tracked metrics in model.evals_result().
    """
    model = XGBClassifier(
        max_depth=max_depth,
        n_estimators=n_estimators,
        learning_rate=learning_rate,
        objective='binary:logistic',
        eval_metric=['logloss', 'auc'],
        random_state=random_state,
        n_jobs=1,
    )
    model.fit(X, y, eval_set=eval_set, verbose=False)
    return model


def predict_probabilities(model, X):
    """Probability of the positive class (label 1) for every row of X."""
    classes = list(model.classes_)
    if 1 not in classes:
        return np.zeros(len(X))
    return model.predict_proba(X)[:, classes.index(1)]


def predict_labels(model, X, threshold=0.5):
    """Class decision: 1 when the positive class probability exceeds the threshold."""
    return (predict_probabilities(model, X) > threshold).astype(int)

# %% [markdown]
# ## Evaluation
# The confusion matrix is always 2x2 (true label by predicted label), even if a class
# never shows up in the test set.

# %%
def confusion_table(y_true, y_pred):
    """
    Cross-tabulates the true labels against the predicted labels.

    Parameters:
    y_true (array-like): True 0/1 labels.
    y_pred (array-like): Predicted 0/1 labels.

    Returns:
    pd.DataFrame: 2x2 table of counts, rows are the true label and columns the predicted label.
    """
    counts = confusion_matrix(y_true, y_pred, labels=[0, 1])
    return pd.DataFrame(
        counts,
        index=pd.Index([0, 1], name='actual'),
        columns=pd.Index([0, 1], name='predicted'),
    )


def accuracy_from_confusion(table):
    """Accuracy as the trace of the confusion matrix over its total."""
    total = table.to_numpy().sum()
    if total == 0:
        return 0.0
    return float(np.trace(table.to_numpy()) / total)


def roc_points(y_true, scores):
    """
    Sweeps the probability threshold to get the ROC curve.

    Returns:
    fpr (np.ndarray), tpr (np.ndarray), and the area under the curve.
    """
    fpr, tpr, _ = roc_curve(y_true, scores, pos_label=1)
    return fpr, tpr, auc(fpr, tpr)


@dataclass
class EvaluationResult:
    name: str
    confusion: pd.DataFrame
    accuracy: float
    fpr: np.ndarray = field(repr=False)
    tpr: np.ndarray = field(repr=False)
    roc_auc: float = float('nan')


def evaluate_model(name, model, X_test, y_test, threshold=0.5):
    """
    Scores a fitted model on the test set.

    Parameters:
    name (str): Label used in printed output and plots.
    model: A fitted classifier with predict_proba.
    X_test (pd.DataFrame): Test predictors.
    y_test (pd.Series): True 0/1 test labels.
    threshold (float): Probability cut-off for the class decision. Default is 0.5.

    Returns:
    EvaluationResult: Confusion matrix, accuracy and ROC curve of the model.
    """
    scores = predict_probabilities(model, X_test)
    y_pred = predict_labels(model, X_test, threshold)
    table = confusion_table(y_test, y_pred)
    accuracy = accuracy_from_confusion(table)

    if y_test.nunique() == 2:
        fpr, tpr, roc_auc = roc_points(y_test, scores)
    else:   # a curve needs both classes in the test set
        fpr, tpr, roc_auc = np.array([]), np.array([]), float('nan')

    print(f"\n{name}")
    print(table)
    print(f"Accuracy: {accuracy:.4f}   AUC: {roc_auc:.4f}")
    return EvaluationResult(name, table, accuracy, fpr, tpr, roc_auc)

# %% [markdown]
# ## Cross-validation
# Each training row gets a fold label from 1 to k. The labels are dealt out in
# order and then shuffled, so fold sizes never differ by more than one row.

# %%
def assign_folds(n_rows, k=5, random_state=123):
    """
    Randomly assigns each row to one of k folds.

    Parameters:
    n_rows (int): Number of rows to assign.
    k (int): Number of folds. Default is 5.
    random_state (int): Random seed.

    Returns:
    np.ndarray: Fold label (1..k) for each row.
    """
    if k < 2:
        raise ValueError("k must be at least 2")
    labels = np.arange(n_rows) % k + 1
    rng = np.random.default_rng(random_state)
    return rng.permutation(labels)


def cross_validate_tree(X, y, folds, random_state=123):
    """
    Manual k-fold cross-validation of a decision tree.

    For every fold, a tree is trained on the other folds and scored on the held-out one.

    Parameters:
    X (pd.DataFrame): Predictors.
    y (pd.Series): 0/1 labels.
    folds (array-like): Fold label of every row, as returned by assign_folds.
    random_state (int): Random seed for the trees.

    Returns:
    pd.Series: Accuracy per fold, indexed by fold label. The mean is the CV accuracy.
    """
    folds = np.asarray(folds)
    accuracies = {}
    for fold in np.unique(folds):
        held_out = folds == fold
        tree = fit_decision_tree(X[~held_out], y[~held_out], random_state=random_state)
        table = confusion_table(y[held_out], tree.predict(X[held_out]))
        accuracies[int(fold)] = accuracy_from_confusion(table)
    return pd.Series(accuracies, name='accuracy').rename_axis('fold')

# %% [markdown]
# ## Coal data: wide to long and back
# The raw table has one row per region or country and one column per year.

# %%
NON_COUNTRIES = [
    'North America', 'Central & South America', 'Antarctica', 'Europe', 'Eurasia',
    'Middle East', 'Africa', 'Asia & Oceania', 'World'
]


def rename_region_column(df):
    """The first column holds the region names but comes in without a header."""
    return df.rename(columns={df.columns[0]: 'region'})


def reshape_long(wide, id_column='region'):
    """
    Converts the wide table (one column per year) to a long table.

    Returns:
    pd.DataFrame: Columns region, year, coal_consumption.
    """
    return wide.melt(id_vars=id_column, var_name='year', value_name='coal_consumption')


def retype_long(long):
    # "--" and other placeholders turn into NaN
    long = long.copy()
    long['year'] = pd.to_numeric(long['year']).astype(int)
    long['coal_consumption'] = pd.to_numeric(long['coal_consumption'], errors='coerce').astype(float)
    return long


def spread_wide(long, id_column='region'):
    """
    Inverse of reshape_long: one row per region and one column per year.
    Regions and years keep the order they first appear in.
    """
    regions = pd.unique(long[id_column])
    years = pd.unique(long['year'])
    wide = (
        long.pivot(index=id_column, columns='year', values='coal_consumption')
        .reindex(index=regions, columns=years)
    )
    wide.columns = [str(year) for year in wide.columns]
    wide = wide.reset_index()
    wide.columns.name = None
    return wide


def partition_regions(long, regions=None):
    """
    Splits the long table into aggregate regions and individual countries.

    Returns:
    The region rows and the country rows as two DataFrames.
    """
    if regions is None:
        regions = NON_COUNTRIES
    is_region = long['region'].isin(regions)
    return long[is_region], long[~is_region]
