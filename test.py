#!/usr/bin/env python3
"""
Smoke test script for a running Guardian server
"""

import asyncio
import aiohttp
import time


SERVER = "http://localhost:8080"

BROWSER_HEADERS = {
    "X-Original-User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "X-Original-Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "X-Original-Accept-Language": "en-US,en;q=0.9",
    "X-Original-Accept-Encoding": "gzip, deflate, br",
    "X-Original-Cookie": "_guardian_check=1",
}


async def test_endpoint(session, name, url, headers=None, json=None, expected_status=200):
    """Test an endpoint"""
    print(f"\n{name}...")
    try:
        async with session.request("POST" if json is not None else "GET", url,
                                   headers=headers, json=json) as response:
            status = response.status
            content = await response.text()

            if status == expected_status:
                print(f"✅ {name} passed (Status: {status})")
                if score := response.headers.get("X-Guardian-Score"):
                    print(f"   Score: {score}, Strategy: {response.headers.get('X-Guardian-Strategy')}")
                if "health" in url or "stats" in url:
                    print(f"Response: {content[:200]}...")
            else:
                print(f"❌ {name} failed (Status: {status}, Expected: {expected_status})")
                print(f"Response: {content}")

    except aiohttp.ClientError as e:
        print(f"❌ {name} failed with error: {e}")


async def main():
    """Run all smoke tests"""
    print("🧪 Testing Guardian Server (Python)")
    print("=" * 50)

    print("⏳ Waiting for server to start...")
    await asyncio.sleep(2)

    async with aiohttp.ClientSession() as session:

        await test_endpoint(session, "1. Testing Health Check", f"{SERVER}/health")

        await test_endpoint(
            session,
            "2. Testing Browser Request",
            f"{SERVER}/auth",
            headers={
                "X-Original-Method": "GET",
                "X-Original-URI": "/articles/welcome",
                "X-Original-Remote-Addr": "192.168.1.100",
                **BROWSER_HEADERS,
            },
        )

        await test_endpoint(
            session,
            "3. Testing Known AI Crawler",
            f"{SERVER}/auth",
            headers={
                "X-Original-Method": "GET",
                "X-Original-URI": "/articles/welcome",
                "X-Original-Remote-Addr": "192.168.1.101",
                "X-Original-User-Agent": "Mozilla/5.0 AppleWebKit/537.36 (compatible; GPTBot/1.0; +https://openai.com/gptbot)",
            },
            expected_status=403,
        )

        await test_endpoint(
            session,
            "4. Testing Missing User-Agent (honeypot strategy)",
            f"{SERVER}/auth",
            headers={
                "X-Original-Method": "GET",
                "X-Original-URI": "/",
                "X-Original-Remote-Addr": "192.168.1.102",
            },
            expected_status=200,
        )

        await test_endpoint(
            session,
            "5. Testing Client Report",
            f"{SERVER}/__guardian__/report",
            json={"signals": ["webdriver", "no_languages"], "path": "/articles/welcome"},
        )

        await test_endpoint(session, "6. Getting Server Statistics", f"{SERVER}/stats")
        await test_endpoint(session, "7. Getting Detection Status", f"{SERVER}/status")

        print("\n🎉 Testing Complete!")

        print("\n📊 Quick Performance Test...")
        start_time = time.time()

        tasks = []
        for i in range(10):
            task = test_endpoint(
                session,
                f"Performance test {i+1}",
                f"{SERVER}/auth",
                headers={
                    "X-Original-Method": "GET",
                    "X-Original-URI": f"/perf{i}",
                    "X-Original-Remote-Addr": f"192.168.1.{i}",
                    **BROWSER_HEADERS,
                }
            )
            tasks.append(task)

        await asyncio.gather(*tasks)

        duration_ms = int((time.time() - start_time) * 1000)
        avg_time = duration_ms // 10

        print(f"⚡ Performance: {avg_time}ms average (10 requests)")

        if avg_time < 50:
            print("✅ Performance: Excellent")
        elif avg_time < 100:
            print("✅ Performance: Good")
        else:
            print("⚠️  Performance: Consider optimization")


if __name__ == "__main__":
    asyncio.run(main())
