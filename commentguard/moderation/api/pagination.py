from rest_framework.pagination import PageNumberPagination


class BlockedWordPagination(PageNumberPagination):
    """Paginação da listagem de palavras bloqueadas, com page_size via query param."""

    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 500
