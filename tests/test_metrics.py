import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.metrics.registry import MetricsRegistry


def request_total(metrics: MetricsRegistry, method: str, route: str, status_code: str):
    return metrics.registry.get_sample_value(
        "http_requests_total",
        {"method": method, "route": route, "status_code": status_code},
    )


class TestMetricsEndpoint:
    def test_metrics_exposition(self, test_client: TestClient) -> None:
        response = test_client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text
        assert "python_info" in response.text
        assert "event_loop_lag_seconds" in response.text

    def test_previous_requests_are_exposed(self, test_client: TestClient) -> None:
        test_client.get("/health")
        response = test_client.get("/metrics")
        assert (
            'http_requests_total{method="GET",route="/health",status_code="200"} 1.0'
            in response.text
        )


class TestRequestCounting:
    def test_counter_sum_matches_request_count(
        self, test_app: FastAPI, test_client: TestClient
    ) -> None:
        metrics: MetricsRegistry = test_app.state.metrics
        test_client.get("/")
        test_client.get("/health")
        test_client.get("/tasks")
        test_client.post("/tasks", json={"title": "counted"})
        test_client.post("/tasks", json=[1, 2])
        test_client.get("/metrics")
        test_client.get("/does-not-exist")

        assert metrics.request_count() == 7

    def test_labels(self, test_app: FastAPI, test_client: TestClient) -> None:
        metrics: MetricsRegistry = test_app.state.metrics
        test_client.post("/tasks", json={"title": "labelled"})
        test_client.post("/tasks", json="nope")
        test_client.get("/does-not-exist")

        assert request_total(metrics, "POST", "/tasks", "201") == 1
        assert request_total(metrics, "POST", "/tasks", "400") == 1
        assert request_total(metrics, "GET", "/does-not-exist", "404") == 1

    def test_failed_requests_are_counted(self, degraded_client: TestClient) -> None:
        metrics: MetricsRegistry = degraded_client.app.state.metrics
        degraded_client.get("/tasks")
        degraded_client.post("/tasks", json={"title": "lost"})

        assert request_total(metrics, "GET", "/tasks", "500") == 1
        assert request_total(metrics, "POST", "/tasks", "400") == 1

    def test_unhandled_exception_counted_once(self, test_app: FastAPI) -> None:
        @test_app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        with TestClient(test_app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "An unexpected error occurred"}
        metrics: MetricsRegistry = test_app.state.metrics
        assert request_total(metrics, "GET", "/boom", "500") == 1
        assert metrics.request_count() == 1

    def test_apps_do_not_share_counters(self, test_app: FastAPI) -> None:
        other = MetricsRegistry()
        with TestClient(test_app) as client:
            client.get("/health")
        assert test_app.state.metrics.request_count() == 1
        assert other.request_count() == 0


class TestMetricsRegistry:
    def test_observe_and_render(self) -> None:
        metrics = MetricsRegistry(collect_default_metrics=False)
        metrics.observe("GET", "/tasks", 200)
        metrics.observe("GET", "/tasks", 200)
        metrics.observe("GET", "/tasks", 500)

        output = metrics.render().decode()
        assert 'route="/tasks",status_code="200"} 2.0' in output
        assert metrics.request_count() == 3

    def test_empty_registry_renders(self) -> None:
        metrics = MetricsRegistry(collect_default_metrics=False)
        output = metrics.render().decode()
        assert "# TYPE http_requests_total counter" in output
        assert metrics.request_count() == 0

    @pytest.mark.asyncio
    async def test_event_loop_lag_sampler(self) -> None:
        metrics = MetricsRegistry(refresh_interval=0.01, collect_default_metrics=False)
        metrics.start()
        await asyncio.sleep(0.05)
        await metrics.stop()

        lag = metrics.registry.get_sample_value("event_loop_lag_seconds")
        assert lag is not None
        assert lag >= 0
        assert metrics._sampler is None

    @pytest.mark.asyncio
    async def test_stop_without_start(self) -> None:
        metrics = MetricsRegistry(collect_default_metrics=False)
        await metrics.stop()
        assert metrics._sampler is None
