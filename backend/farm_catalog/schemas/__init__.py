from farm_catalog.schemas.common import NoticeOut, PaginationMeta, PaginatedResponse, MutationResponse, ErrorResponse
from farm_catalog.schemas.catalog import (
    CatalogBase, CatalogUpdate, CatalogResponse,
    SpeciesCreate, SpeciesUpdate, SpeciesResponse,
    BreedCreate, BreedUpdate, BreedResponse,
    CountryCreate, CountryUpdate, CountryResponse,
    VaccineCreate, VaccineUpdate, VaccineResponse,
    VeterinarianCreate, VeterinarianUpdate, VeterinarianResponse,
    ProductCreate, ProductUpdate, ProductResponse,
    CampaignCreate, CampaignUpdate, CampaignResponse,
)
from farm_catalog.schemas.preference import (
    SelectRequest, OrderRequest, BatchRequest, LinkOut, ResolvedItemOut, ResolutionResponse, UsageResponse,
)
from farm_catalog.schemas.selection import SelectionItemOut, SelectionGroupOut, PickerResponse
from farm_catalog.schemas.junction import (
    BreedCountryLink, BreedCountryUnlink, BreedCountryResponse,
    CampaignCountryLink, CampaignCountryUnlink, CampaignCountryResponse,
    ToggleActiveRequest,
)
from farm_catalog.schemas.farm import FarmCreate, FarmResponse
