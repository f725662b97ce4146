from pathlib import Path

import pytest

from conform.pipeline.sources import load_raw_batch

SOURCE_FILES = {
    "crm_customers": (
        "source_crm/cust_info.csv",
        """cst_id,cst_key,cst_firstname,cst_lastname,cst_marital_status,cst_gndr,cst_create_date
11000,AW00011000, Jon ,Yang ,M,M,2025-10-06
11001,AW00011001,Eugene,Huang,S,,2025-10-06
11002,AW00011002,Ruben,Torres,M,M,2025-10-06
11002,AW00011002,Ruben,Torres-Old,S,M,2025-01-01
,AW00099999,Ghost,Row,S,F,2025-10-06
""",
    ),
    "crm_products": (
        "source_crm/prd_info.csv",
        """prd_id,prd_key,prd_nm,prd_cost,prd_line,prd_start_dt,prd_end_dt
210,CO-RF-FR-R92B-58,HL Road Frame - Black- 58,,R ,2003-07-01,
211,CO-RF-FR-R92R-58,HL Road Frame - Red- 58,,R ,2003-07-01,
212,AC-HE-HL-U509-R,Sport-100 Helmet- Red,12,S ,2011-07-01,2007-12-28
213,AC-HE-HL-U509-R,Sport-100 Helmet- Red,14,S ,2012-07-01,
214,AC-HE-HL-U509-R,Sport-100 Helmet- Red,13,S ,2013-07-01,
""",
    ),
    "crm_sales": (
        "source_crm/sales_details.csv",
        """sls_ord_num,sls_prd_key,sls_cust_id,sls_order_dt,sls_ship_dt,sls_due_dt,sls_sales,sls_quantity,sls_price
SO43697,FR-R92B-58,11000,20101229,20110105,20110110,3578,1,3578
SO43698,HL-U509-R,11001,20101229,20110105,20110110,,3,10
SO43699,HL-U509-R,11002,0,20110105,20110110,50,3,20
SO43700,FR-R92R-58,11001,20101229,20110105,20110110,40,2,
SO43701,BK-UNKNOWN,99999,2010122,20110105,20110110,10,1,-10
""",
    ),
    "erp_customer_demographics": (
        "source_erp/CUST_AZ12.csv",
        """CID,BDATE,GEN
NASAW00011000,1971-10-06,Male
AW00011001,1976-05-10,Female
NASAW00011002,2199-01-01,
""",
    ),
    "erp_customer_locations": (
        "source_erp/LOC_A101.csv",
        """CID,CNTRY
AW-00011000,Australia
AW-00011001,DE
AW-00011002,USA
""",
    ),
    "erp_product_categories": (
        "source_erp/PX_CAT_G1V2.csv",
        """ID,CAT,SUBCAT,MAINTENANCE
CO_RF,Components,Road Frames,Yes
AC_HE,Accessories,Helmets,Yes
""",
    ),
}


def write_source_files(source_dir: Path) -> dict[str, Path]:
    paths = {}
    for entity, (relative, content) in SOURCE_FILES.items():
        path = source_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        paths[entity] = path
    return paths


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    out = tmp_path / "sources"
    write_source_files(out)
    return out


@pytest.fixture
def raw_batch(source_dir: Path) -> dict:
    paths = {entity: source_dir / relative for entity, (relative, _content) in SOURCE_FILES.items()}
    return load_raw_batch(paths)
