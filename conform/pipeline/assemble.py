"""Star-schema assembly: conformed dimensions and the sales fact."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from conform.common.constants import NOT_AVAILABLE
from conform.common.deterministic import nulls_first
from conform.common.models import (
    CrmCustomer,
    CrmProduct,
    CrmSalesLine,
    CustomerDimRow,
    ErpCustomerDemographics,
    ErpCustomerLocation,
    ErpProductCategory,
    ProductDimRow,
    SalesFactRow,
)
from conform.common.vocabulary import clean_customer_ref
from conform.pipeline.surrogate_keys import assign_surrogate_keys, build_key_index
from conform.pipeline.temporal import is_current


@dataclass(frozen=True)
class FactAssembly:
    rows: list[SalesFactRow]
    unmatched_customers: int
    unmatched_products: int


def _consolidated_gender(crm_gender: str, erp: ErpCustomerDemographics | None) -> str:
    if crm_gender != NOT_AVAILABLE:
        return crm_gender
    if erp is None:
        return NOT_AVAILABLE
    return erp.gender or NOT_AVAILABLE


def customer_order_key(customer: CrmCustomer) -> object:
    return customer.customer_id


def product_order_key(product: CrmProduct) -> object:
    return (nulls_first(product.start_date), product.product_number)


def key_customers(customers: Iterable[CrmCustomer]) -> list[tuple[int, CrmCustomer]]:
    return assign_surrogate_keys(customers, order_key=customer_order_key)


def key_products(products: Iterable[CrmProduct]) -> list[tuple[int, CrmProduct]]:
    """Key the current view: only versions without an end date are numbered."""
    active = [product for product in products if is_current(product)]
    return assign_surrogate_keys(active, order_key=product_order_key)


def build_customer_dimension(
    keyed_customers: Iterable[tuple[int, CrmCustomer]],
    demographics: Iterable[ErpCustomerDemographics],
    locations: Iterable[ErpCustomerLocation],
) -> list[CustomerDimRow]:
    demographics_by_ref = {record.customer_ref: record for record in demographics}
    locations_by_ref = {record.customer_ref: record for record in locations}

    rows: list[CustomerDimRow] = []
    for customer_key, customer in keyed_customers:
        ref = clean_customer_ref(customer.customer_number)
        erp = demographics_by_ref.get(ref) if ref is not None else None
        location = locations_by_ref.get(ref) if ref is not None else None
        rows.append(
            CustomerDimRow(
                customer_key=customer_key,
                customer_id=customer.customer_id,
                customer_number=customer.customer_number,
                first_name=customer.first_name,
                last_name=customer.last_name,
                country=location.country if location is not None else None,
                marital_status=customer.marital_status,
                gender=_consolidated_gender(customer.gender, erp),
                birthdate=erp.birthdate if erp is not None else None,
                create_date=customer.create_date,
            )
        )
    return rows


def build_product_dimension(
    keyed_products: Iterable[tuple[int, CrmProduct]],
    categories: Iterable[ErpProductCategory],
) -> list[ProductDimRow]:
    categories_by_id = {record.category_id: record for record in categories}

    rows: list[ProductDimRow] = []
    for product_key, product in keyed_products:
        category = categories_by_id.get(product.category_id)
        rows.append(
            ProductDimRow(
                product_key=product_key,
                product_id=product.product_id,
                product_number=product.product_number,
                product_name=product.product_name,
                category_id=product.category_id,
                category=category.category if category is not None else None,
                subcategory=category.subcategory if category is not None else None,
                maintenance=category.maintenance if category is not None else None,
                cost=product.cost,
                product_line=product.product_line,
                start_date=product.start_date,
            )
        )
    return rows


def assemble_sales_facts(
    lines: Iterable[CrmSalesLine],
    customers: list[CustomerDimRow],
    products: list[ProductDimRow],
) -> FactAssembly:
    """Attach surrogate keys to every sales line; misses keep the row with a null key."""
    customer_index = build_key_index(
        ((row.customer_key, row) for row in customers),
        natural_key=lambda row: row.customer_id,
    )
    product_index = build_key_index(
        ((row.product_key, row) for row in products),
        natural_key=lambda row: row.product_number,
    )

    rows: list[SalesFactRow] = []
    unmatched_customers = 0
    unmatched_products = 0
    for line in lines:
        customer_key = customer_index.get(line.customer_id)
        product_key = product_index.get(line.product_number)
        if customer_key is None:
            unmatched_customers += 1
        if product_key is None:
            unmatched_products += 1
        rows.append(
            SalesFactRow(
                order_number=line.order_number,
                product_key=product_key,
                customer_key=customer_key,
                order_date=line.order_date,
                shipping_date=line.ship_date,
                due_date=line.due_date,
                sales_amount=line.amount,
                quantity=line.quantity,
                price=line.price,
            )
        )
    return FactAssembly(rows=rows, unmatched_customers=unmatched_customers, unmatched_products=unmatched_products)
