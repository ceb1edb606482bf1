import pytest

from dcfpro.domain.types import RawStatementYear, Scenario, ScenarioYear


def _scenario_year(**inputs) -> ScenarioYear:
  '''Historical year with the given canonical inputs.'''
  return ScenarioYear(
      raw=RawStatementYear(income_statement={'revenues': inputs['revenues']}),
      inputs=dict(inputs),
      outputs={},
  )


@pytest.fixture
def raw_statements() -> dict:
  """Three reported years using a mix of field name variants."""
  return {
      '2021': {
          'IS': {
              'revenues': 1000,
              'cogs': 600,
              'sgna': 120,
              'other_operating_income': 10,
              'other_operating_expense': 5,
              'selling_expenses': 35,
              'financial_expense': 15,
              'financial_income': 5,
              'net_income': 150,
          },
          'BS': {
              'cash': 100,
              'accounts_receivable': 100,
              'inventories': 80,
              'accounts_payable': 60,
              'ppe': 500,
              'loans_long': 250,
              'lease_liabilities_short': 50,
          },
          'CF': {
              'capex': 40,
              'depreciation': 50,
          },
      },
      '2022': {
          'IS': {
              'revenue': 1100,
              'cost_of_goods_sold': 660,
              'sgna': 165,
              'financial_expense': 12,
          },
          'BS': {
              'cash': 120,
              'receivables': 110,
              'inventory': 88,
              'accounts_payable': 66,
              'fixed_assets': 520,
              'loans_long': 280,
              'loans_short': 20,
          },
          'CF': {
              'capital_expenditures': 55,
              'depr': 40,
          },
      },
      '2023': {
          'IS': {
              'sales': 1210,
              'cost_of_sales': 726,
              'sgna': 181.5,
              'financial_expense': 9,
          },
          'BS': {
              'cash_and_equivalents': 150,
              'trade_receivables': 121,
              'stock': 96.8,
              'trade_payables': 72.6,
              'property_plant_equipment': 540,
              'loans_long': 260,
          },
          'CF': {
              'purchase_of_fixed_assets': 60.5,
              'amortization': 52,
          },
      },
  }


@pytest.fixture
def single_year_scenario() -> Scenario:
  """One reported year, the reference end-to-end case."""
  return {
      '2023':
          _scenario_year(revenues=1000.0,
                         cogs=600.0,
                         sgna=150.0,
                         depr=50.0,
                         capex=40.0,
                         receivables=100.0,
                         inventory=80.0,
                         payables=60.0,
                         net_debt=200.0),
  }


@pytest.fixture
def two_year_scenario() -> Scenario:
  """Two reported years where revenue doubles."""
  return {
      '2022':
          _scenario_year(revenues=100.0,
                         cogs=60.0,
                         sgna=15.0,
                         capex=5.0,
                         depr=4.0,
                         ppe=40.0,
                         receivables=10.0,
                         inventory=6.0,
                         payables=3.0,
                         financial_expense=2.0,
                         net_debt=20.0),
      '2023':
          _scenario_year(revenues=200.0,
                         cogs=100.0,
                         sgna=40.0,
                         capex=10.0,
                         depr=6.0,
                         ppe=50.0,
                         receivables=30.0,
                         inventory=10.0,
                         payables=5.0,
                         financial_expense=3.0,
                         net_debt=30.0),
  }
