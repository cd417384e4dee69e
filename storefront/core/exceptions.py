"""
커스텀 예외 정의

애플리케이션 전역에서 사용되는 커스텀 예외 클래스들입니다.
각 예외는 응답에 사용할 HTTP 상태 코드를 status_code 속성으로 가집니다.
"""

from storefront.core.messages import NO_PRODUCTS_FOUND


class CatalogException(Exception):
    """
    카탈로그 예외의 기본 클래스

    HTTP Status Code: 500 Internal Server Error (하위 클래스에서 재정의)
    """

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidFilterException(CatalogException):
    """
    잘못된 필터 파라미터 (카테고리, ID 목록, 가격 범위, 페이지 값)

    HTTP Status Code: 400 Bad Request
    """

    status_code = 400


class InvalidReferenceException(CatalogException):
    """
    존재하지 않거나 형식이 잘못된 참조 (카테고리, 브랜드, 색상, 변형 ID 등)

    HTTP Status Code: 400 Bad Request
    """

    status_code = 400


class ProductValidationException(CatalogException):
    """
    필수 필드 누락 등 상품 요청 본문 검증 실패

    HTTP Status Code: 422 Unprocessable Entity
    """

    status_code = 422


class ProductNotFoundException(CatalogException):
    """
    상품을 찾을 수 없을 때 발생하는 예외

    HTTP Status Code: 404 Not Found
    """

    status_code = 404

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with id {product_id} not found")


class BrandNotFoundException(CatalogException):
    """
    브랜드를 찾을 수 없을 때 발생하는 예외

    HTTP Status Code: 404 Not Found
    """

    status_code = 404

    def __init__(self, brand_id):
        self.brand_id = brand_id
        super().__init__(f"Brand with id {brand_id} not found")


class NoProductsFoundException(CatalogException):
    """
    조건에 맞는 상품이 하나도 없을 때 발생하는 예외 (신상품, 이달의 딜)

    HTTP Status Code: 404 Not Found
    """

    status_code = 404

    def __init__(self, message: str = NO_PRODUCTS_FOUND):
        super().__init__(message)


class ProductAlreadyExistsException(CatalogException):
    """
    같은 slug를 가진 상품이 이미 존재할 때 발생하는 예외

    HTTP Status Code: 409 Conflict
    """

    status_code = 409

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Product with slug '{slug}' already exists")


class BrandAlreadyExistsException(CatalogException):
    """
    중복된 브랜드명으로 생성/수정하려 할 때 발생하는 예외

    HTTP Status Code: 409 Conflict
    """

    status_code = 409

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Brand with name '{name}' already exists")


class BrandInUseException(CatalogException):
    """
    상품이 참조 중인 브랜드를 삭제하려 할 때 발생하는 예외

    HTTP Status Code: 400 Bad Request
    """

    status_code = 400

    def __init__(self, brand_id):
        self.brand_id = brand_id
        super().__init__(
            "Please remove this brand from all products before deleting it."
        )


class LockAcquisitionException(CatalogException):
    """
    락 획득 실패 시 발생하는 예외

    HTTP Status Code: 409 Conflict
    """

    status_code = 409

    def __init__(self, resource: str, message: str = "Failed to acquire lock"):
        self.resource = resource
        super().__init__(f"{message} for resource: {resource}")


class CatalogOperationException(CatalogException):
    """
    원자적 작업 단위(트랜잭션) 실패 시 발생하는 예외

    원인 예외의 메시지를 포함하지만 스택 트레이스는 노출하지 않습니다.

    HTTP Status Code: 500 Internal Server Error
    """

    status_code = 500

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
