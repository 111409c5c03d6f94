"""Checkout flow with one broken directive."""

# annotate: disable=Naming


def checkoutNow() -> None:  # annotate: disable=LineLength
    return None


private("checkoutNow", "missing")
