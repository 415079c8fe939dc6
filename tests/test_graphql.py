INSTRUCTORS = "{ instructors { id name } }"

ADD_PACKAGE = """
mutation AddPackage($input: PackageInput!) {
  addPackage(input: $input) { success message error fieldErrors { field messages } }
}
"""


async def test_hello_is_public(gql):
    result = await gql("{ hello }", account=None, authorized=False)

    assert result.errors is None
    assert result.data == {"hello": "Hello from Giro!"}


async def test_anonymous_request_is_rejected(gql):
    result = await gql(INSTRUCTORS, account=None, authorized=False)

    assert result.data is None
    assert result.errors[0].message == "Authentication required."


async def test_admin_outside_allow_list_is_rejected(gql, outsider):
    result = await gql(INSTRUCTORS, account=outsider, authorized=False)

    assert result.errors[0].message == "No autorizado para acceder al dashboard."


async def test_add_package_reports_field_errors(gql):
    result = await gql(ADD_PACKAGE, {"input": {"name": "Pack", "classCredits": "diez", "price": "10"}})

    payload = result.data["addPackage"]
    assert payload["success"] is False
    assert payload["error"] == "Invalid fields: class_credits"
    assert [e["field"] for e in payload["fieldErrors"]] == ["class_credits"]


async def test_add_and_list_packages(gql):
    result = await gql(
        ADD_PACKAGE, {"input": {"name": "Pack 5", "classCredits": "5", "price": "27.5", "expirationDays": ""}}
    )
    assert result.data["addPackage"] == {
        "success": True,
        "message": "Package created successfully",
        "error": None,
        "fieldErrors": None,
    }

    listed = await gql("{ packages { name classCredits price expirationDays } }")
    assert listed.data["packages"] == [
        {"name": "Pack 5", "classCredits": 5, "price": 27.5, "expirationDays": None}
    ]


async def test_create_user_returns_generated_password(gql):
    result = await gql(
        """
        mutation {
          createUser(input: {email: "nuevo@example.com", name: "Nuevo Socio", shoeSize: "40"}) {
            success password error user { email shoeSize purchaseCount }
          }
        }
        """
    )

    payload = result.data["createUser"]
    assert payload["success"] is True
    assert payload["password"] == "socio-N25"
    assert payload["user"] == {"email": "nuevo@example.com", "shoeSize": "40", "purchaseCount": 0}


async def test_available_bikes_with_bad_class_id(gql):
    result = await gql('{ availableBikes(classId: "nope") { success error availableBikes { number } } }')

    assert result.data["availableBikes"] == {
        "success": False,
        "error": "ID de clase inválido.",
        "availableBikes": [],
    }


async def test_available_bikes(gql, studio, reserve):
    await reserve(studio, [2])

    result = await gql(
        "query($id: String!) { availableBikes(classId: $id) { success availableBikes { number } } }",
        {"id": str(studio["class"].id)},
    )

    assert result.data["availableBikes"]["success"] is True
    assert [b["number"] for b in result.data["availableBikes"]["availableBikes"]] == [1, 3, 4]


async def test_approve_without_ids(gql):
    result = await gql('mutation { approveInvoices(ids: [], prefix: "001-001-", start: 1) { success error } }')

    assert result.data["approveInvoices"] == {"success": False, "error": "IDs requeridos"}


async def test_delete_instructor_with_bad_id(gql):
    result = await gql('mutation { deleteInstructor(id: "x") { success error } }')

    assert result.data["deleteInstructor"] == {"success": False, "error": "Invalid ID."}
