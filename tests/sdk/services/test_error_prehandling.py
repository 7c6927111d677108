import pytest
from pytest_httpx import HTTPXMock

from typedhttp import (
    PrehandledError,
    RequestState,
    TypedRemoteServiceError,
    TypedServiceResponseError,
)
from tests.utils.services import Flavor, Service


class TestErrorPrehandling:
    def test_prehandle_errors_follows_error_type(
        self, service: Service, prehandling_service: Service
    ):
        assert service.prehandle_errors is False
        assert prehandling_service.prehandle_errors is True

    @pytest.mark.asyncio
    async def test_simple_get(
        self,
        httpx_mock: HTTPXMock,
        prehandling_service: Service,
        base_url: str,
        flavor: Flavor,
    ):
        httpx_mock.add_response(
            url=f"{base_url}/test_get",
            method="GET",
            json={"Success": True, "SomeMessage": "Test message"},
        )

        data = (
            await prehandling_service.create_request()
            .add_segment("test_get")
            .get(flavor.data)
        )

        assert data.some_message == "Test message"

    @pytest.mark.asyncio
    async def test_error_handling(
        self,
        httpx_mock: HTTPXMock,
        prehandling_service: Service,
        base_url: str,
        flavor: Flavor,
    ):
        httpx_mock.add_response(
            url=f"{base_url}/test_error",
            method="POST",
            json={"Code": 314, "Message": "Error 314"},
        )

        request = prehandling_service.create_request().add_segment("test_error").post()
        with pytest.raises(PrehandledError) as exc_info:
            await request

        assert isinstance(exc_info.value.response, flavor.basic_error)
        assert exc_info.value.response.code == 314
        assert exc_info.value.response.message == "Error 314"
        assert exc_info.value.response.success is False
        assert request.state is RequestState.FAILED

    @pytest.mark.asyncio
    async def test_explicit_false_flag_fails_typed_request(
        self,
        httpx_mock: HTTPXMock,
        prehandling_service: Service,
        base_url: str,
        flavor: Flavor,
    ):
        httpx_mock.add_response(
            url=f"{base_url}/test_error",
            method="GET",
            json={"Success": False, "Code": 7, "SomeMessage": "ignored"},
        )

        with pytest.raises(PrehandledError) as exc_info:
            await (
                prehandling_service.create_request()
                .add_segment("test_error")
                .get(flavor.data)
            )

        assert isinstance(exc_info.value, TypedServiceResponseError)
        assert not isinstance(exc_info.value, TypedRemoteServiceError)
        assert exc_info.value.response.code == 7

    @pytest.mark.asyncio
    async def test_body_not_shaped_like_error_is_decoded(
        self,
        httpx_mock: HTTPXMock,
        prehandling_service: Service,
        base_url: str,
        flavor: Flavor,
    ):
        httpx_mock.add_response(
            url=f"{base_url}/test_get_array",
            method="GET",
            json=[{"SomeMessage": "Test message"}],
        )

        data = (
            await prehandling_service.create_request()
            .add_segment("test_get_array")
            .get(list[flavor.data])
        )

        assert [item.some_message for item in data] == ["Test message"]

    @pytest.mark.asyncio
    async def test_empty_success_body_passes(
        self, httpx_mock: HTTPXMock, prehandling_service: Service, base_url: str
    ):
        httpx_mock.add_response(url=f"{base_url}/test_post", method="POST")

        request = prehandling_service.create_request().add_segment("test_post").post()
        await request

        assert request.state is RequestState.COMPLETED

    @pytest.mark.asyncio
    async def test_remote_error_still_typed(
        self,
        httpx_mock: HTTPXMock,
        prehandling_service: Service,
        base_url: str,
        flavor: Flavor,
    ):
        httpx_mock.add_response(
            url=f"{base_url}/test_error",
            status_code=400,
            json={"Code": 314, "Message": "Error 314"},
        )

        with pytest.raises(TypedRemoteServiceError) as exc_info:
            await prehandling_service.create_request().add_segment("test_error").post()

        assert exc_info.value.status_code == 400
        assert isinstance(exc_info.value.response, flavor.basic_error)
