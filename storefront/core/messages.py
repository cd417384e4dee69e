"""
응답 메시지 상수
"""

PRODUCTS_FETCHED = "Products fetched successfully"
PRODUCT_FETCHED = "Product fetched successfully"
PRODUCT_CREATED = "Product created successfully"
PRODUCT_UPDATED = "Product updated successfully"
PRODUCT_DELETED = "Product deleted successfully"
NO_PRODUCTS_FOUND = "No products found"
FILTER_OPTIONS_FETCHED = "Filter options fetched successfully"

BRAND_CREATED = "Brand created successfully"
BRAND_FETCHED = "Brand fetched successfully"
BRANDS_FETCHED = "Brands fetched successfully"
ALL_BRANDS_FETCHED = "All brands fetched successfully"
BRAND_UPDATED = "Brand updated successfully"
BRAND_DELETED = "Brand deleted successfully"
