"""Describes the Kitchenly domain. Centres around the recipe aggregate.

Why is this hard?

- A recipe is a row plus three sets of links (ingredients, categories,
  tags) to rows that many recipes share.
- Updates are partial. Scalars change one by one, while a link set is always
  swapped whole.
- Filtering by categories or tags means "linked to all of them", not "any".

Everything talks to the database through raw, parameterized SQL.
"""
