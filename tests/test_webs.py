"""
Tests for webs (sprest/sharepoint/webs.py).

Tests cover:
- Accessor paths of Web (no I/O)
- Webs.add and the url of the created web
- Web.update, delete and the parameterised POST operations
- Two-step operations (get_catalog, get_parent_web, ensure_user)
- Storage entities and the remaining GET helpers

Uses respx for mocking HTTP requests.
"""

import json

import pytest
import respx
from httpx import Response

from sprest.sharepoint.appcatalog import AppCatalog
from sprest.sharepoint.lists import List
from sprest.sharepoint.relateditems import RelatedItemManager
from sprest.sharepoint.types import CatalogType, ChangeQuery
from sprest.sharepoint.users import SiteUser
from sprest.sharepoint.webs import Web, Webs
from sprest.transport.client import JSON_VERBOSE, SPHttpClient
from sprest.transport.errors import SPHttpError
from tests.constants import API_WEB, HOST, LOGIN_NAME, SITE_URL


def sent_json(route: respx.Route) -> object:
    """Decode the JSON body of the last request a route received."""
    return json.loads(route.calls.last.request.content)


# =============================================================================
# ACCESSOR PATHS
# =============================================================================


@pytest.mark.unit
class TestWebAccessors:
    """Every accessor equals the web url plus its fragment."""

    @pytest.mark.parametrize(
        ("accessor", "suffix"),
        [
            (lambda w: w.webs, "/webs"),
            (lambda w: w.webinfos, "/webinfos"),
            (lambda w: w.all_properties, "/allproperties"),
            (lambda w: w.content_types, "/contenttypes"),
            (lambda w: w.lists, "/lists"),
            (lambda w: w.fields, "/fields"),
            (lambda w: w.features, "/features"),
            (lambda w: w.available_fields, "/availablefields"),
            (lambda w: w.navigation, "/navigation"),
            (lambda w: w.site_users, "/siteusers"),
            (lambda w: w.site_groups, "/sitegroups"),
            (lambda w: w.site_user_info_list, "/siteuserinfolist"),
            (lambda w: w.regional_settings, "/regionalsettings"),
            (lambda w: w.current_user, "/currentuser"),
            (lambda w: w.folders, "/folders"),
            (lambda w: w.user_custom_actions, "/usercustomactions"),
            (lambda w: w.role_definitions, "/roledefinitions"),
            (lambda w: w.root_folder, "/rootFolder"),
            (lambda w: w.associated_owner_group, "/associatedownergroup"),
            (lambda w: w.associated_member_group, "/associatedmembergroup"),
            (lambda w: w.associated_visitor_group, "/associatedvisitorgroup"),
            (lambda w: w.default_document_library, "/DefaultDocumentLibrary"),
            (lambda w: w.custom_list_template, "/getcustomlisttemplates"),
            (
                lambda w: w.get_subwebs_filtered_for_current_user(),
                "/getSubwebsFilteredForCurrentUser(nWebTemplateFilter=-1,nConfigurationFilter=-1)",
            ),
            (
                lambda w: w.get_folder_by_server_relative_url("/sites/dev/Shared Documents"),
                "/getFolderByServerRelativeUrl('/sites/dev/Shared Documents')",
            ),
            (
                lambda w: w.get_folder_by_server_relative_path("/sites/dev/Docs"),
                "/getFolderByServerRelativePath(decodedUrl='/sites/dev/Docs')",
            ),
            (
                lambda w: w.get_file_by_server_relative_url("/sites/dev/Docs/a.docx"),
                "/getFileByServerRelativeUrl('/sites/dev/Docs/a.docx')",
            ),
            (
                lambda w: w.get_file_by_server_relative_path("/sites/dev/Docs/a%23.docx"),
                "/getFileByServerRelativePath(decodedUrl='/sites/dev/Docs/a%23.docx')",
            ),
            (
                lambda w: w.get_list("/sites/dev/Lists/Tasks"),
                "/getList('/sites/dev/Lists/Tasks')",
            ),
            (
                lambda w: w.available_web_templates(),
                "/getavailablewebtemplates(lcid=1033, doincludecrosslanguage=true)",
            ),
            (
                lambda w: w.available_web_templates(1031, False),
                "/getavailablewebtemplates(lcid=1031, doincludecrosslanguage=false)",
            ),
            (lambda w: w.get_user_by_id(7), "/getUserById(7)"),
        ],
    )
    def test_accessor_path(self, accessor, suffix):
        """Test that the accessor appends its fragment to the web url."""
        assert accessor(Web(SITE_URL)).to_url() == f"{API_WEB}{suffix}"

    def test_accessors_do_not_mutate_web(self):
        """Test that building children leaves the web untouched."""
        web = Web(SITE_URL)
        web.lists.get_by_title("Tasks").items.top(1)

        assert web.to_url_and_query() == API_WEB

    def test_subwebs_filtered_returns_collection(self):
        """Test that the filtered subwebs can be queried further."""
        subwebs = Web(SITE_URL).get_subwebs_filtered_for_current_user(1, 0)

        assert isinstance(subwebs, Webs)
        assert subwebs.select("Title").to_url_and_query().endswith(
            "(nWebTemplateFilter=1,nConfigurationFilter=0)?$select=Title"
        )

    def test_related_items_at_web_root(self):
        """Test that the related items manager hangs off the web url, not _api/web."""
        manager = Web(SITE_URL).related_items

        assert isinstance(manager, RelatedItemManager)
        assert manager.to_url() == f"{SITE_URL}/_api/SP.RelatedItemManager"

    def test_app_catalog_of_this_web(self):
        """Test the default tenant catalog path."""
        catalog = Web(SITE_URL).get_app_catalog()

        assert isinstance(catalog, AppCatalog)
        assert catalog.to_url() == f"{SITE_URL}/_api/web/tenantappcatalog/AvailableApps"

    def test_app_catalog_of_other_web(self):
        """Test that an explicit url selects another web's catalog."""
        catalog = Web(SITE_URL).get_app_catalog("https://contoso.sharepoint.com/sites/apps")

        assert catalog.to_url() == (
            "https://contoso.sharepoint.com/sites/apps/_api/web/tenantappcatalog/AvailableApps"
        )


# =============================================================================
# ADD / UPDATE / DELETE
# =============================================================================


class TestWebsAdd:
    """Tests for Webs.add."""

    @respx.mock
    async def test_add_posts_creation_information(self, web: Web):
        """Test the request body and the derived web reference."""
        route = respx.post(f"{API_WEB}/webs/add").mock(
            return_value=Response(
                200,
                json={
                    "d": {
                        "__metadata": {
                            "id": f"{SITE_URL}/team/_api/Web",
                            "uri": f"{SITE_URL}/team/_api/Web",
                            "type": "SP.Web",
                        },
                        "Id": "0b3e4d9c-1111-2222-3333-444455556666",
                        "Title": "Team",
                    }
                },
            )
        )

        result = await web.webs.add("Team", "team", description="Team site")

        assert sent_json(route) == {
            "parameters": {
                "__metadata": {"type": "SP.WebCreationInformation"},
                "Description": "Team site",
                "Language": 1033,
                "Title": "Team",
                "Url": "team",
                "UseSamePermissionsAsParentSite": True,
                "WebTemplate": "STS",
            }
        }
        assert route.calls.last.request.headers["Content-Type"] == JSON_VERBOSE
        assert result.data["Title"] == "Team"
        assert isinstance(result.web, Web)
        assert result.web.to_url() == f"{SITE_URL}/team/_api/web"
        assert result.web.client is web.client

    @respx.mock
    async def test_add_minimal_metadata_response(self, web: Web):
        """Test that the web url is read from a minimal metadata editLink too."""
        respx.post(f"{API_WEB}/webs/add").mock(
            return_value=Response(
                200,
                json={
                    "odata.type": "SP.Web",
                    "odata.id": f"{SITE_URL}/team/_api/web/",
                    "odata.editLink": f"{SITE_URL}/team/_api/web/",
                    "Id": "abc",
                },
            )
        )

        result = await web.webs.add("Team", "team", template="STS#3", inherit_permissions=False)

        assert result.web.to_url() == f"{SITE_URL}/team/_api/web"
        assert "_api/web/_api" not in result.web.to_url()

    @respx.mock
    async def test_add_response_with_odata_id_only(self, web: Web):
        """Test a response whose __metadata has no uri and whose url is in odata.id."""
        respx.post(f"{API_WEB}/webs/add").mock(
            return_value=Response(
                200,
                json={
                    "__metadata": {"type": "SP.Web"},
                    "Id": "0b3e4d9c-1111-2222-3333-444455556666",
                    "odata.id": f"{SITE_URL}/team/_api/web/guid'0b3e4d9c'",
                },
            )
        )

        result = await web.webs.add("Team", "team")

        url = result.web.to_url()
        assert url.startswith(f"{SITE_URL}/team/")
        assert "_api/web/guid" not in url
        assert url.count("_api/web") == 1

    @respx.mock
    async def test_add_strips_only_first_api_web(self, web: Web):
        """Test that only the leading _api/web of the reported url is removed."""
        respx.post(f"{API_WEB}/webs/add").mock(
            return_value=Response(
                200,
                json={
                    "odata.type": "SP.Web",
                    "odata.editLink": f"{SITE_URL}/team/_api/web/lists/_api/web",
                },
            )
        )

        result = await web.webs.add("Team", "team")

        assert result.web.to_url() == f"{SITE_URL}/team/lists/_api/web/_api/web"


class TestWebUpdateDelete:
    """Tests for Web.update and Web.delete."""

    @respx.mock
    async def test_update_sends_merge(self, web: Web):
        """Test the MERGE tunnel header and that the result wraps the receiver."""
        route = respx.post(API_WEB).mock(return_value=Response(204))

        result = await web.update({"Title": "New title", "QuickLaunchEnabled": False})

        request = route.calls.last.request
        assert request.headers["X-HTTP-Method"] == "MERGE"
        assert "if-match" not in request.headers
        assert sent_json(route) == {
            "__metadata": {"type": "SP.Web"},
            "Title": "New title",
            "QuickLaunchEnabled": False,
        }
        assert result.web is web
        assert result.data == {}

    @respx.mock
    async def test_delete_sends_http_delete(self, web: Web):
        """Test that delete uses the DELETE verb and returns None."""
        route = respx.delete(API_WEB).mock(return_value=Response(200, text=""))

        assert await web.delete() is None
        assert route.called

    @respx.mock
    async def test_errors_propagate(self, web: Web):
        """Test that transport errors reach the caller unchanged."""
        respx.post(API_WEB).mock(
            return_value=Response(403, json={"error": {"message": {"value": "Access denied."}}})
        )

        with pytest.raises(SPHttpError) as exc_info:
            await web.update({"Title": "x"})

        assert exc_info.value.status_code == 403


# =============================================================================
# PARAMETERISED POST OPERATIONS
# =============================================================================


class TestWebPostOperations:
    """Tests for operations that differ only in how arguments are embedded."""

    @respx.mock
    async def test_apply_theme_json_body(self, web: Web):
        """Test that theme urls travel in the JSON body."""
        route = respx.post(f"{API_WEB}/applytheme").mock(return_value=Response(204))

        await web.apply_theme(
            "/_catalogs/theme/15/palette011.spcolor",
            "/_catalogs/theme/15/fontscheme007.spfont",
            "",
            True,
        )

        assert sent_json(route) == {
            "backgroundImageUrl": "",
            "colorPaletteUrl": "/_catalogs/theme/15/palette011.spcolor",
            "fontSchemeUrl": "/_catalogs/theme/15/fontscheme007.spfont",
            "shareGenerated": True,
        }

    @respx.mock
    async def test_apply_web_template_query_parameter(self, web: Web):
        """Test that the template name travels as the @t query parameter."""
        route = respx.post(f"{API_WEB}/applywebtemplate(@t)").mock(return_value=Response(204))

        await web.apply_web_template("STS#0")

        request = route.calls.last.request
        assert request.url.params["@t"] == "'STS#0'"
        assert request.content == b""

    @respx.mock
    async def test_ensure_user_builds_user_from_response(self, web: Web):
        """Test that the user reference comes from the response entity url."""
        route = respx.post(f"{API_WEB}/ensureuser").mock(
            return_value=Response(
                200,
                json={
                    "d": {
                        "__metadata": {
                            "uri": f"{SITE_URL}/_api/Web/GetUserById(12)",
                            "type": "SP.User",
                        },
                        "Id": 12,
                        "LoginName": LOGIN_NAME,
                    }
                },
            )
        )

        result = await web.ensure_user(LOGIN_NAME)

        assert sent_json(route) == {"logonName": LOGIN_NAME}
        assert isinstance(result.user, SiteUser)
        assert result.user.to_url() == f"{SITE_URL}/_api/Web/GetUserById(12)"
        assert result.data["Id"] == 12

    @respx.mock
    async def test_get_changes_posts_change_query(self, web: Web):
        """Test that the query is tagged and returned untouched."""
        changes = [{"ChangeType": 1, "ItemId": 3}]
        route = respx.post(f"{API_WEB}/getchanges").mock(
            return_value=Response(200, json={"value": changes})
        )

        query = ChangeQuery(
            add=True,
            item=True,
            change_token_start={"StringValue": "1;2;abc;636;-1"},
        )
        result = await web.get_changes(query)

        assert result == changes
        assert sent_json(route) == {
            "query": {
                "__metadata": {"type": "SP.ChangeQuery"},
                "Add": True,
                "ChangeTokenStart": {"StringValue": "1;2;abc;636;-1"},
                "Item": True,
            }
        }

    @respx.mock
    async def test_create_default_associated_groups(self, web: Web):
        """Test the bodiless POST."""
        route = respx.post(f"{API_WEB}/createDefaultAssociatedGroups").mock(
            return_value=Response(204)
        )

        assert await web.create_default_associated_groups() is None
        assert route.called


# =============================================================================
# TWO-STEP OPERATIONS
# =============================================================================


class TestWebTwoStepOperations:
    """Tests for operations that derive a reference from a first response."""

    @respx.mock
    async def test_get_catalog_selects_id_then_builds_list(self, web: Web):
        """Test that the list reference comes from the returned entity url."""
        route = respx.get(f"{API_WEB}/getcatalog(111)").mock(
            return_value=Response(
                200,
                json={
                    "odata.metadata": f"{SITE_URL}/_api/$metadata#SP.ApiData.Lists/@Element",
                    "odata.type": "SP.List",
                    "odata.id": f"{SITE_URL}/_api/Web/Lists(guid'9a1f')",
                    "odata.editLink": "Web/Lists(guid'9a1f')",
                    "Id": "9a1f",
                },
            )
        )

        result = await web.get_catalog(CatalogType.WEB_TEMPLATE)

        assert route.calls.last.request.url.params["$select"] == "Id"
        assert isinstance(result.list, List)
        assert result.list.to_url() == f"{SITE_URL}/_api/Web/Lists(guid'9a1f')"
        assert "getcatalog" not in result.list.to_url()
        assert result.data["Id"] == "9a1f"

    @respx.mock
    async def test_get_parent_web_opens_by_id(self, http: SPHttpClient):
        """Test the lookup of ParentWeb/Id followed by openWebById on the site."""
        web = Web(f"{SITE_URL}/team", client=http)
        lookup = respx.get(f"{SITE_URL}/team/_api/web").mock(
            return_value=Response(200, json={"ParentWeb": {"Id": "p-1"}})
        )
        open_web = respx.post(f"{SITE_URL}/team/_api/site/openWebById('p-1')").mock(
            return_value=Response(
                200,
                json={
                    "odata.type": "SP.Web",
                    "odata.id": f"{SITE_URL}/_api/Web",
                    "Id": "p-1",
                },
            )
        )

        result = await web.get_parent_web()

        params = lookup.calls.last.request.url.params
        assert params["$select"] == "ParentWeb/Id"
        assert params["$expand"] == "ParentWeb"
        assert open_web.called
        assert result.web.to_url() == f"{SITE_URL}/_api/web"
        assert result.data["Id"] == "p-1"


# =============================================================================
# STORAGE ENTITIES AND GET HELPERS
# =============================================================================


class TestWebGetOperations:
    """Tests for storage entities and the simple GET helpers."""

    @respx.mock
    async def test_get_storage_entity(self, web: Web):
        """Test the key embedded as a quoted function argument."""
        respx.get(f"{API_WEB}/getStorageEntity('MyKey')").mock(
            return_value=Response(200, json={"Value": "v", "Description": "d", "Comment": "c"})
        )

        entity = await web.get_storage_entity("MyKey")

        assert entity["Value"] == "v"

    @respx.mock
    async def test_set_storage_entity(self, web: Web):
        """Test the body of setStorageEntity."""
        route = respx.post(f"{API_WEB}/setStorageEntity").mock(return_value=Response(204))

        await web.set_storage_entity("MyKey", "v", description="d")

        assert sent_json(route) == {
            "comments": "",
            "description": "d",
            "key": "MyKey",
            "value": "v",
        }

    @respx.mock
    async def test_remove_storage_entity_is_post(self, web: Web):
        """Test that removal is a POST to the keyed function."""
        route = respx.post(f"{API_WEB}/removeStorageEntity('MyKey')").mock(
            return_value=Response(204)
        )

        await web.remove_storage_entity("MyKey")

        assert route.called

    @respx.mock
    async def test_map_to_icon(self, web: Web):
        """Test the inline arguments and the scalar result."""
        route = respx.get(host=HOST).mock(
            return_value=Response(200, json={"d": {"MapToIcon": "icdocx.png"}})
        )

        icon = await web.map_to_icon("report.docx", size=1)

        assert icon == "icdocx.png"
        assert route.calls.last.request.url.path == (
            "/sites/dev/_api/web/maptoicon(filename='report.docx', progid='', size=1)"
        )

    @respx.mock
    async def test_get_client_side_web_parts(self, web: Web):
        """Test that the collection is unwrapped."""
        parts = [{"Id": "a", "Name": "Text"}, {"Id": "b", "Name": "Image"}]
        respx.get(f"{API_WEB}/GetClientSideWebParts").mock(
            return_value=Response(200, json={"value": parts})
        )

        assert await web.get_client_side_web_parts() == parts
