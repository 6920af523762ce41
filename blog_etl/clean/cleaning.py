"""
Column-level cleaning rules

Each rule is a small value object; `apply_rules` runs them in order and
returns the cleaned copy plus the null reports produced along the way.
Nulls are reported, never silently dropped: a post accepts a handful of
discontinued or renamed entities, and the report says exactly which.

Usage:
    from blog_etl.clean import SplitColumn, DropNulls, apply_rules

    clean, reports = apply_rules(df, [
        SplitColumn('name', ',', ['county', 'state']),
        DropNulls(['2020'], key='fips', max_excluded=5),
    ])
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from blog_etl.errors import NullToleranceExceeded, SchemaMismatch


# Counties renamed or re-coded since the 2010 census, old FIPS -> new FIPS
RENAMED_COUNTY_FIPS = {
    '46113': '46102',  # Shannon County SD -> Oglala Lakota County
    '02270': '02158',  # Wade Hampton Census Area AK -> Kusilvak Census Area
}


@dataclass
class NullReport:
    """Rows with nulls in the checked columns, identified by key"""
    columns: List[str]
    total_rows: int
    keys: List[Any] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.keys)

    @property
    def fraction(self) -> float:
        return self.count / self.total_rows if self.total_rows else 0.0

    def summary(self) -> str:
        if not self.count:
            return f'no nulls in {self.columns}'
        shown = ', '.join(str(k) for k in self.keys[:10])
        return (f'{self.count:,} of {self.total_rows:,} rows '
                f'({self.fraction*100:.2f}%) null in {self.columns}: {shown}')


def require_columns(df: pd.DataFrame, columns: Sequence[str], context: str = 'table'):
    """Raise SchemaMismatch naming any of `columns` absent from `df`"""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaMismatch(f'Expected columns absent from {context}', keys=missing)


def report_nulls(df: pd.DataFrame, columns: Sequence[str],
                 key: Optional[str] = None) -> NullReport:
    """
    Find rows with a null in any of `columns`

    Args:
        df: Table to check
        columns: Columns that must be populated
        key: Column identifying the entity (default: row index)
    """
    columns = list(columns)
    require_columns(df, columns + ([key] if key else []), 'null check')

    mask = df[columns].isna().any(axis=1)
    if key:
        keys = df.loc[mask, key].tolist()
    else:
        keys = df.index[mask].tolist()
    return NullReport(columns=columns, total_rows=len(df), keys=keys)


@dataclass
class SplitColumn:
    """Split `column` on the first `delimiter` into the `into` columns"""
    column: str
    delimiter: str
    into: List[str]
    keep_original: bool = False

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        require_columns(df, [self.column], 'split rule')
        df = df.copy()
        parts = df[self.column].astype('string').str.split(
            self.delimiter, n=len(self.into) - 1, expand=True
        )
        for i, name in enumerate(self.into):
            if i in parts.columns:
                df[name] = parts[i].str.strip()
            else:
                df[name] = pd.NA
        if not self.keep_original and self.column not in self.into:
            df = df.drop(columns=self.column)
        return df, None


@dataclass
class RestrictColumns:
    """Keep only `columns`, in that order"""
    columns: List[str]

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        require_columns(df, self.columns, 'column restriction')
        return df[list(self.columns)].copy(), None


@dataclass
class RestrictRange:
    """Keep rows whose `column` lies in [start, end]; None leaves that side open"""
    column: str
    start: Any = None
    end: Any = None

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        require_columns(df, [self.column], 'range restriction')
        mask = pd.Series(True, index=df.index)
        if self.start is not None:
            mask &= df[self.column] >= self.start
        if self.end is not None:
            mask &= df[self.column] <= self.end
        return df[mask].copy(), None


@dataclass
class RenameValues:
    """Replace values in `column` (renamed or re-coded entities)"""
    column: str
    mapping: Dict[Any, Any]

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        require_columns(df, [self.column], 'rename rule')
        df = df.copy()
        df[self.column] = df[self.column].replace(self.mapping)
        return df, None


@dataclass
class DropValues:
    """Exclude rows whose `column` is one of `values` (e.g. multi-team total rows)"""
    column: str
    values: List[Any]

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        require_columns(df, [self.column], 'drop-values rule')
        return df[~df[self.column].isin(list(self.values))].copy(), None


@dataclass
class FillNulls:
    """Impute nulls in `columns` with a constant"""
    columns: List[str]
    value: Any = 0

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        require_columns(df, self.columns, 'fill rule')
        report = report_nulls(df, self.columns)
        df = df.copy()
        df[self.columns] = df[self.columns].fillna(self.value)
        return df, report


@dataclass
class DropNulls:
    """
    Exclude rows with nulls in `columns`, reporting them by `key`

    More than `max_excluded` null rows raises NullToleranceExceeded;
    None means any number is accepted (still reported).
    """
    columns: List[str]
    key: Optional[str] = None
    max_excluded: Optional[int] = None

    def apply(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Optional[NullReport]]:
        report = report_nulls(df, self.columns, self.key)
        if self.max_excluded is not None and report.count > self.max_excluded:
            raise NullToleranceExceeded(
                f'{report.count} rows with nulls in {self.columns} '
                f'(tolerance {self.max_excluded})',
                keys=report.keys
            )
        kept = df.dropna(subset=list(self.columns)).copy()
        return kept, report


def apply_rules(df: pd.DataFrame, rules: Sequence,
                verbose: bool = True) -> Tuple[pd.DataFrame, List[NullReport]]:
    """
    Apply cleaning rules in order

    Returns:
        (cleaned copy, null reports from rules that produce them)
    """
    reports = []
    rows_before = len(df)

    for rule in rules:
        df, report = rule.apply(df)
        if report is not None:
            reports.append(report)
            if verbose and report.count:
                print(f'  ⚠️  {type(rule).__name__}: {report.summary()}')

    if verbose:
        print(f'  ✓ Cleaned: {rows_before:,} → {len(df):,} rows, {len(rules)} rules applied')

    return df, reports
