"""Fleet app package.

Rental vehicles (the reservable assets), bookable equipment and the
activities customers can add to a rental. The catalogue is maintained in
the Django admin and exposed read-only through the API.
"""
