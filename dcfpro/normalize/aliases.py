"""
Field alias specifications.

Defines, per canonical key, which raw statement category it is read from and
the ordered list of raw field names accepted for it. The first alias present
(non-null) in the category wins. Composite keys are sums of signed raw
terms, each missing term counting as zero.

Aliases are plain data: extend the lists here, not the lookup code.
"""

# Accepted names for the three statement categories of one raw year.
STATEMENT_KEYS = {
    'income_statement': ('IS', 'incomeStatement', 'income_statement'),
    'balance_sheet': ('BS', 'balanceSheet', 'balance_sheet'),
    'cash_flow': ('CF', 'cashFlow', 'cash_flow'),
}

FIELD_SPECS = {
    # Income statement
    'revenues': {
        'statement': 'income_statement',
        'aliases': ['revenues', 'revenue', 'sales'],
    },
    'cogs': {
        'statement': 'income_statement',
        'aliases': ['cogs', 'cost_of_goods_sold', 'cost_of_sales'],
    },
    'net_income': {
        'statement': 'income_statement',
        'aliases': ['net_income', 'netProfit', 'net_profit',
                    'profit_after_tax'],
    },
    'ebit': {
        'statement': 'income_statement',
        'aliases': ['ebit', 'operating_income'],
    },
    'gross_profit': {
        'statement': 'income_statement',
        'aliases': ['gross_profit', 'grossProfit'],
    },
    # Balance sheet
    'cash': {
        'statement': 'balance_sheet',
        'aliases': ['cash', 'cash_and_equivalents',
                    'cash_and_cash_equivalents'],
    },
    'receivables': {
        'statement': 'balance_sheet',
        'aliases': ['receivables', 'accounts_receivable', 'trade_receivables'],
    },
    'inventory': {
        'statement': 'balance_sheet',
        'aliases': ['inventory', 'inventories', 'stock'],
    },
    'ppe': {
        'statement': 'balance_sheet',
        'aliases': ['ppe', 'property_plant_equipment', 'fixed_assets'],
    },
    'equity_parent': {
        'statement': 'balance_sheet',
        'aliases': ['equity_parent', 'equity', 'total_equity'],
    },
    'short_term_liabilities': {
        'statement': 'balance_sheet',
        'aliases': ['short_term_liabilities', 'current_liabilities'],
    },
    'long_term_liabilities': {
        'statement': 'balance_sheet',
        'aliases': ['long_term_liabilities', 'non_current_liabilities'],
    },
    'payables': {
        'statement': 'balance_sheet',
        'aliases': ['short_term_trade_payables', 'accounts_payable',
                    'short_term_liabilities', 'trade_payables'],
    },
    # Cash flow
    'operating_cf': {
        'statement': 'cash_flow',
        'aliases': ['operating_cf', 'net_cash_from_operating_activities',
                    'cash_from_operations'],
    },
    'capex': {
        'statement': 'cash_flow',
        'aliases': ['capex', 'capital_expenditures',
                    'purchase_of_fixed_assets'],
    },
    'depr': {
        'statement': 'cash_flow',
        'aliases': ['depr', 'depreciation', 'amortization'],
    },
    'investing_cf': {
        'statement': 'cash_flow',
        'aliases': ['investing_cf', 'net_cash_from_investing_activities'],
    },
    'financing_cf': {
        'statement': 'cash_flow',
        'aliases': ['financing_cf', 'net_cash_from_financing_activities'],
    },
    'net_change_in_cash': {
        'statement': 'cash_flow',
        'aliases': ['net_change_in_cash', 'change_in_cash'],
    },
}

COMPOSITE_SPECS = {
    'sgna': {
        'statement': 'income_statement',
        'terms': [
            ('sgna', 1.0),
            ('other_operating_income', -1.0),
            ('other_operating_expense', 1.0),
            ('selling_expenses', 1.0),
        ],
    },
    'financial_expense': {
        'statement': 'income_statement',
        'terms': [
            ('financial_expense', 1.0),
            ('financial_income', -1.0),
        ],
    },
    'debt': {
        'statement': 'balance_sheet',
        'terms': [
            ('loans_short', 1.0),
            ('loans_long', 1.0),
            ('lease_liabilities_short', 1.0),
            ('lease_liabilities_long', 1.0),
            ('debt_issuance_short', 1.0),
            ('debt_issuance_long', 1.0),
        ],
    },
}
