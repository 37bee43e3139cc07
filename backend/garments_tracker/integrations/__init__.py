# Overview: Adapters for the external collaborators (identity provider, payment provider).
