import matplotlib.pyplot as plt
import seaborn as sns

# %% [markdown]
# ## Exploration plots
# Every function returns the figures it made. The pipelines decide whether to show them.

# %%
def plot_categorical_by_outcome(df, columns, target_column):
    """
    One bar chart per categorical column, with the counts split by outcome.

    Parameters:
    df (pd.DataFrame): The input DataFrame.
    columns (list): Categorical columns to plot.
    target_column (str): The outcome column used for the bar colors.

    Returns:
    list: The matplotlib figures, one per column.
    """
    figures = []
    for col in columns:
        fig, ax = plt.subplots(figsize=(6, 4))
        sns.countplot(data=df, x=col, hue=target_column, ax=ax)
        ax.set_title(f'{col} by {target_column}')
        fig.tight_layout()
        figures.append(fig)
    return figures


def plot_numeric_by_outcome(df, columns, target_column, bins=20):
    """One histogram per numeric column, stacked by outcome."""
    figures = []
    for col in columns:
        fig, ax = plt.subplots(figsize=(6, 4))
        sns.histplot(data=df, x=col, hue=target_column, bins=bins, multiple='stack', ax=ax)
        ax.set_title(f'Distribution of {col} by {target_column}')
        fig.tight_layout()
        figures.append(fig)
    return figures


def correlation_matrix(df, columns=None):
    if columns is None:
        columns = df.select_dtypes(include=['number']).columns.tolist()
    return df[columns].corr()


def plot_correlation_heatmap(df, columns=None):
    corr = correlation_matrix(df, columns)
    fig, ax = plt.subplots(figsize=(7, 6))
    sns.heatmap(corr, annot=True, fmt='.2f', cmap='coolwarm', vmin=-1, vmax=1, square=True, ax=ax)
    ax.set_title('Correlation of Numeric Variables')
    fig.tight_layout()
    return fig


def plot_pairwise(df, columns, target_column):
    """Scatter matrix of the numeric columns, colored by outcome."""
    grid = sns.pairplot(df, vars=columns, hue=target_column, diag_kind='hist', corner=True)
    grid.figure.suptitle('Pairwise Scatter Matrix', y=1.02)
    return grid.figure

# %% [markdown]
# ## Model comparison

# %%
def plot_roc_curves(results):
    """
    Overlays the ROC curves of several models.

    Parameters:
    results (list): EvaluationResult objects, one per model.

    Returns:
    The matplotlib figure.
    """
    fig, ax = plt.subplots(figsize=(6, 5))
    for result in results:
        if len(result.fpr) == 0:
            continue   # no curve when the test set has a single class
        ax.plot(result.fpr, result.tpr, label=f'{result.name} (AUC={result.roc_auc:.3f})')
    ax.plot([0, 1], [0, 1], linestyle='--', color='grey')
    ax.set_xlabel('False Positive Rate')
    ax.set_ylabel('True Positive Rate')
    ax.set_title('ROC Curve Comparison')
    ax.legend(loc='lower right')
    fig.tight_layout()
    return fig

# %% [markdown]
# ## Coal consumption plots

# %%
def plot_region_consumption(region_long):
    fig, ax = plt.subplots(figsize=(10, 6))
    sns.scatterplot(data=region_long, x='year', y='coal_consumption', color='black', s=12, ax=ax)
    sns.lineplot(data=region_long, x='year', y='coal_consumption', hue='region', ax=ax)
    ax.set_title('Coal Consumption by Region')
    ax.set_ylabel('Coal consumption')
    fig.tight_layout()
    return fig


def plot_top_countries(country_long, n=5):
    """Consumption over time for the n countries with the highest total consumption."""
    totals = country_long.groupby('region')['coal_consumption'].sum()
    top = totals.nlargest(n).index
    subset = country_long[country_long['region'].isin(top)]
    fig, ax = plt.subplots(figsize=(10, 6))
    sns.lineplot(data=subset, x='year', y='coal_consumption', hue='region', hue_order=list(top), ax=ax)
    ax.set_title(f'Coal Consumption of the Top {n} Countries')
    ax.set_ylabel('Coal consumption')
    fig.tight_layout()
    return fig
