"""World Bank country directory aggregation with population and GDP enrichment."""
