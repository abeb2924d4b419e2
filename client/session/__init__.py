"""Player session: login, character creation, restore and logout."""
