from rest_framework.pagination import PageNumberPagination


class ProductPagination(PageNumberPagination):
    """
    Page-number pagination for the product catalogue.

    Clients pick the page with `?page=` and may shrink or grow it with `?page_size=`,
    up to `max_page_size`.
    """
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100
