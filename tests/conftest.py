import os
import sys
from pathlib import Path

import pytest


# Settings are read at import time, so these must be set before any
# junitbridge module is imported.
os.environ.setdefault("BRIDGE_BASE_URL", "http://localhost:8080")
os.environ.setdefault("WRITE_PLAN_FILES", "false")


def pytest_sessionstart(session):  # noqa: ARG001
    # Ensure src/ is importable when running pytest without installation
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


LOGIN_TEST_JAVA = r'''
package com.example.e2e;

import org.junit.jupiter.api.AfterEach;
import org.junit.jupiter.api.BeforeEach;
import org.junit.jupiter.api.Test;
import org.openqa.selenium.By;
import org.openqa.selenium.WebDriver;
import org.openqa.selenium.chrome.ChromeDriver;
import org.openqa.selenium.support.ui.ExpectedConditions;
import org.openqa.selenium.support.ui.WebDriverWait;

import java.time.Duration;

import static org.junit.jupiter.api.Assertions.*;

public class LoginTest {
    private WebDriver driver;
    private WebDriverWait wait;
    private String baseUrl = "http://localhost:8080";

    @BeforeEach
    void setUp() {
        driver = new ChromeDriver();
        wait = new WebDriverWait(driver, Duration.ofSeconds(10));
    }

    @Test
    public void testSuccessfulLogin() {
        driver.get("http://localhost:8080/login");
        driver.findElement(By.id("username")).sendKeys("alice");
        driver.findElement(By.name("password")).sendKeys("s3cret");
        driver.findElement(By.cssSelector("button[type='submit']")).click();
        wait.until(ExpectedConditions.visibilityOfElementLocated(By.className("welcome")));
        assertEquals("Welcome, alice", driver.findElement(By.className("welcome")).getText());
    }

    @Test
    public void testInvalidPassword() {
        driver.get(baseUrl + "/login");
        // driver.findElement(By.id("ignored")).click();
        driver.findElement(By.id("username")).clear();
        driver.findElement(By.id("username")).sendKeys(invalidUser);
        driver.findElement(By.xpath("//button[@id='login']")).click();
        assertTrue(driver.findElement(By.id("error")).isDisplayed());
        assertFalse(driver.getCurrentUrl().contains("/home"));
    }

    @Test
    public void testMenuLinks() {
        String marker = "not a brace: { or }";
        driver.findElement(By.linkText("Help")).click();
        int count = driver.findElements(By.tagName("a")).size();
        assertTrue(count > 3);
    }

    @AfterEach
    void tearDown() {
        if (driver != null) {
            driver.quit();
        }
    }
}
'''


@pytest.fixture
def login_java() -> str:
    return LOGIN_TEST_JAVA


@pytest.fixture
def login_java_file(tmp_path: Path) -> Path:
    p = tmp_path / "LoginTest.java"
    p.write_text(LOGIN_TEST_JAVA, encoding="utf-8")
    return p
