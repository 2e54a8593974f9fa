"""Adapters turning tabular survey exports into validated `SurveyRow`s."""
